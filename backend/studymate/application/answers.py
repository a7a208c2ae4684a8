from __future__ import annotations

from studymate.domain.models import Answer, AnswerPolicy


class AnswerBook:
    """Answers generated in one solver session plus the free-tier gate.

    ``answered`` only grows for free-tier answers; premium regeneration is
    governed by ``policy`` (``append`` keeps every generation, ``replace``
    keeps only the latest one per question, in its original position).
    """

    def __init__(self, *, policy: AnswerPolicy = "append"):
        if policy not in ("append", "replace"):
            raise ValueError(f"Unknown answer policy: {policy}")
        self.policy: AnswerPolicy = policy
        self._answers: list[Answer] = []
        self._answered: set[str] = set()
        self._loading: dict[str, bool] = {}

    @property
    def answers(self) -> list[Answer]:
        return list(self._answers)

    def has_answer(self, question_id: str) -> bool:
        return any(item.question_id == question_id for item in self._answers)

    def answered_before(self, question_id: str) -> bool:
        return question_id in self._answered

    def is_loading(self, question_id: str) -> bool:
        return self._loading.get(question_id, False)

    def any_loading(self) -> bool:
        return any(self._loading.values())

    def can_answer(self, question_id: str, is_premium: bool) -> bool:
        if is_premium:
            return True
        return not self.has_answer(question_id) and not self.answered_before(question_id)

    def mark_loading(self, question_id: str) -> None:
        self._loading[question_id] = True

    def clear_loading(self, question_id: str) -> None:
        self._loading.pop(question_id, None)

    def record(self, answer: Answer, *, is_premium: bool) -> None:
        if self.policy == "replace":
            for idx, item in enumerate(self._answers):
                if item.question_id == answer.question_id:
                    self._answers[idx] = answer
                    break
            else:
                self._answers.append(answer)
        else:
            self._answers.append(answer)

        if not is_premium:
            self._answered.add(answer.question_id)

    def clear(self) -> None:
        self._answers.clear()
        self._answered.clear()
        self._loading.clear()
