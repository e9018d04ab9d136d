# survey_engine/core/traversal.py
"""Replays a respondent's path through a survey, one question at a time.

Rules are evaluated right after their trigger question is presented, against a
snapshot that only holds answers to questions presented so far.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set

from survey_engine.core.legacy import collect_rules
from survey_engine.core.logic import evaluate_logic_rules
from survey_engine.models.logic import LogicAction, LogicResult, NavigationDecision
from survey_engine.models.question import Question

logger = logging.getLogger(__name__)


class SurveyTraversal:
    def __init__(
        self,
        questions: Sequence[Question],
        responses: Optional[Mapping[str, Any]] = None,
        strict: Optional[bool] = None,
    ):
        self.questions: List[Question] = list(questions)
        self.responses: Mapping[str, Any] = responses or {}
        self.strict = strict
        self.by_id: Dict[str, Question] = {q.id: q for q in self.questions}
        self.position: Dict[str, int] = {q.id: i for i, q in enumerate(self.questions)}
        self.rules = collect_rules(self.questions)
        # targets of `show` rules stay hidden until a rule reveals them
        self.hidden_by_default: Set[str] = {
            r.target_question_id
            for groups in self.rules.values()
            for _, rules in groups
            for r in rules
            if r.action == LogicAction.SHOW and r.target_question_id in self.position
        }

        self._skipped: Set[str] = set()
        self._revealed: Set[str] = set()
        self._presented: List[str] = []

    # ------------------------- state -------------------------
    def _visible(self, qid: str) -> bool:
        if qid in self._skipped or qid in self._presented:
            return False
        return qid not in self.hidden_by_default or qid in self._revealed

    def _next_visible(self, start: int) -> Optional[int]:
        for i in range(start, len(self.questions)):
            if self._visible(self.questions[i].id):
                return i
        return None

    def _snapshot(self) -> Dict[str, Any]:
        return {qid: self.responses[qid] for qid in self._presented if qid in self.responses}

    # ------------------------- walk -------------------------
    def _evaluate_at(self, qid: str) -> List[LogicResult]:
        snapshot = self._snapshot()
        matched = []
        for _, rules in self.rules.get(qid, []):
            result = evaluate_logic_rules(rules, snapshot, self.by_id, strict=self.strict)
            if result.matched_rule is not None:
                matched.append(result)
        return matched

    def walk(self) -> Iterator[NavigationDecision]:
        """Yields one decision per presented question, in presentation order.

        Every declaring question's matched skip/show is applied; of the matched
        end/jump actions only the first, in survey order of declaration, is taken.
        """
        self._skipped, self._revealed, self._presented = set(), set(), []
        pos = self._next_visible(0)

        while pos is not None:
            current = self.questions[pos]
            self._presented.append(current.id)

            matched = self._evaluate_at(current.id)
            for result in matched:
                if result.action == LogicAction.SKIP:
                    self._skipped.add(result.target_question_id)
                elif result.action == LogicAction.SHOW:
                    self._revealed.add(result.target_question_id)

            flow = next((r for r in matched if r.action in (LogicAction.END, LogicAction.JUMP)), None)
            decisive = flow or (matched[0] if matched else None)
            rule_id = decisive.matched_rule.id if decisive else None
            nxt: Optional[int] = pos + 1

            if flow is not None and flow.action == LogicAction.END:
                yield NavigationDecision(current_question_id=current.id, ended=True, matched_rule_id=rule_id)
                return
            if flow is not None:
                target = flow.target_question_id
                if target in self._presented:
                    logger.warning("jump from %s to already presented %s ignored (rule %s)", current.id, target, rule_id)
                else:
                    self._skipped.discard(target)
                    self._revealed.add(target)
                    nxt = self.position[target]

            pos = self._next_visible(nxt)
            yield NavigationDecision(
                current_question_id=current.id,
                next_question_id=self.questions[pos].id if pos is not None else None,
                ended=pos is None,
                matched_rule_id=rule_id,
            )

    def path(self) -> List[str]:
        return [d.current_question_id for d in self.walk()]


def replay_path(questions: Sequence[Question], responses: Optional[Mapping[str, Any]] = None) -> List[str]:
    """Ids of the questions a respondent with these answers is shown, in order."""
    return SurveyTraversal(questions, responses).path()


def first_question_id(questions: Sequence[Question]) -> Optional[str]:
    trav = SurveyTraversal(questions)
    pos = trav._next_visible(0)
    return trav.questions[pos].id if pos is not None else None


def next_question_id(
    questions: Sequence[Question],
    current_question_id: str,
    responses: Optional[Mapping[str, Any]] = None,
) -> NavigationDecision:
    """Where to go after `current_question_id`, given the answers collected so far."""
    trav = SurveyTraversal(questions, responses)
    if current_question_id not in trav.position:
        raise KeyError(current_question_id)

    for decision in trav.walk():
        if decision.current_question_id == current_question_id:
            return decision

    logger.warning("question %s is not on the replayed path; falling back to survey order", current_question_id)
    pos = trav.position[current_question_id] + 1
    nxt = trav.questions[pos].id if pos < len(trav.questions) else None
    return NavigationDecision(current_question_id=current_question_id, next_question_id=nxt, ended=nxt is None)
