import sys, json, hashlib

from survey_engine.core.aggregator import run_scoring_engine
from survey_engine.core.config import settings
from survey_engine.core.errors import SnapshotError
from survey_engine.core.log import set_survey_id, setup_logging
from survey_engine.core.snapshot_loader import load_snapshot
from survey_engine.models.snapshot import SurveySnapshot

# ---- πεδία του result που δεν θέλουμε να επηρεάζουν το hash ----
IGNORE_RESULT_KEYS = {"questionScores"}


def canonical(obj):
    return json.dumps(obj, sort_keys=True, separators=(",", ":"))


def score_snapshot(snapshot: SurveySnapshot) -> dict:
    result = run_scoring_engine(snapshot.questions, snapshot.responses, snapshot.score_config)
    payload = result.to_payload()
    return {k: v for k, v in payload.items() if k not in IGNORE_RESULT_KEYS}


def result_hash(snapshot: SurveySnapshot) -> str:
    return hashlib.sha256(canonical(score_snapshot(snapshot)).encode("utf-8")).hexdigest()


def main(argv) -> int:
    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    if len(argv) > 3:
        print("Usage: python verify_score_snapshot.py [snapshot.json] [expected_hash.txt]")
        return 1

    try:
        snapshot, src = load_snapshot(argv[1] if len(argv) >= 2 else None)
    except SnapshotError as e:
        print(f"Snapshot error: {e}")
        return 2
    set_survey_id(snapshot.survey_id)

    got_hash = result_hash(snapshot)
    if len(argv) < 3:
        # χωρίς αναμενόμενο hash απλώς τυπώνουμε το τρέχον
        print(got_hash)
        return 0

    with open(argv[2], "r", encoding="utf-8-sig") as f:
        expected_hash = f.read().strip()

    print("Expected:", expected_hash)
    print("Got     :", got_hash)
    if got_hash == expected_hash:
        print("MATCH")
        return 0
    print("MISMATCH")
    # βοηθητικό print για διάγνωση
    print(f"Scored result ({src}):")
    print(json.dumps(score_snapshot(snapshot), indent=2, ensure_ascii=False))
    return 3


if __name__ == "__main__":
    sys.exit(main(sys.argv))
