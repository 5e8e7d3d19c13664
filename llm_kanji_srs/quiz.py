"""
Study session controller.

A pass over a batch of kanji asks two prompts per kanji, meaning first and
then reading. A wrong answer must be retried until it is right. In review
mode every wrong answer lowers the kanji's SRS level straight away and a
kanji is leveled up once both of its prompts are answered correctly. In
learning mode nothing is scheduled until the end of the pass; a fully
correct pass marks every kanji as learned.
"""
import datetime
import os
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Set, Tuple

from . import answers, kana, scheduler
from .db import NotFound

DEBUG_MODE = os.getenv("DEBUG", "0") == "1"

LEARNING = "learning"
REVIEW = "review"

AWAITING_ANSWER = "awaiting_answer"
AWAITING_RETRY = "awaiting_retry"
COMPLETE = "complete"

CORRECT = "correct"
INCORRECT = "incorrect"
EMPTY = "empty"


class SessionStateError(RuntimeError):
    """Raised when the session is driven out of order."""


@dataclass(frozen=True)
class Prompt:
    item_index: int
    kind: str


@dataclass
class QuizSession:
    prompts: List[Prompt]
    results: List[bool]
    current_prompt_index: int = 0
    # Kanji ids already leveled up during this pass
    leveled_ids: Set[int] = field(default_factory=set)

    @classmethod
    def for_items(cls, count: int) -> "QuizSession":
        prompts = [
            Prompt(index, kind)
            for index in range(count)
            for kind in (answers.MEANING, answers.READING)
        ]
        return cls(prompts=prompts, results=[False] * len(prompts))


@dataclass
class AnswerOutcome:
    status: str
    prompt: Prompt
    expected: str
    # (kanji_id, correct) for every scheduler update that reached the store
    scheduled: List[Tuple[int, bool]] = field(default_factory=list)
    missing_ids: List[int] = field(default_factory=list)
    complete: bool = False

    @property
    def correct(self) -> bool:
        return self.status == CORRECT


@dataclass
class SessionSummary:
    mode: str
    total_prompts: int
    correct_prompts: int
    all_correct: bool
    leveled_ids: List[int]
    missing_ids: List[int]


def _default_clock() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class StudySession:
    """Drives one quiz pass; see the module docstring for the rules."""

    def __init__(
        self,
        items: Sequence[Any],
        store: Any = None,
        clock: Optional[Callable[[], datetime.datetime]] = None,
        mode: str = REVIEW,
    ) -> None:
        if mode not in (LEARNING, REVIEW):
            raise ValueError(f"Unknown study mode: {mode}")
        if store is None:
            from . import db as store
        self.store = store
        self.clock = clock or _default_clock
        self.mode = mode
        self.items: List[Any] = list(items)
        self._start()

    @classmethod
    def for_learning(cls, store: Any = None, limit: Optional[int] = None, **kwargs: Any) -> "StudySession":
        if store is None:
            from . import db as store
        return cls(store.select_items_for_learning(limit), store=store, mode=LEARNING, **kwargs)

    @classmethod
    def for_review(cls, store: Any = None, **kwargs: Any) -> "StudySession":
        if store is None:
            from . import db as store
        clock = kwargs.get("clock") or _default_clock
        return cls(store.select_items_due_for_review(clock()), store=store, mode=REVIEW, **kwargs)

    def _start(self) -> None:
        self.session = QuizSession.for_items(len(self.items))
        self.missing_ids: List[int] = []
        self.state = AWAITING_ANSWER if self.session.prompts else COMPLETE

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------
    @property
    def is_complete(self) -> bool:
        return self.state == COMPLETE

    @property
    def current_prompt(self) -> Optional[Prompt]:
        if self.is_complete:
            return None
        return self.session.prompts[self.session.current_prompt_index]

    @property
    def current_item(self) -> Optional[Any]:
        prompt = self.current_prompt
        return self.items[prompt.item_index] if prompt else None

    @property
    def results(self) -> List[bool]:
        return list(self.session.results)

    def assist(self, text: str) -> str:
        """Apply romaji input assistance, on reading prompts only."""
        prompt = self.current_prompt
        if prompt is None or prompt.kind != answers.READING:
            return text
        return kana.assist_reading_input(text)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def submit(self, text: str) -> AnswerOutcome:
        if self.state == COMPLETE:
            raise SessionStateError("Session is already complete")
        if self.state == AWAITING_RETRY:
            raise SessionStateError("Previous answer was incorrect; call retry() first")

        index = self.session.current_prompt_index
        prompt = self.session.prompts[index]
        item = self.items[prompt.item_index]
        expected = answers.expected_answer(prompt.kind, item)

        if not (text or "").strip():
            return AnswerOutcome(EMPTY, prompt, expected)

        if not answers.is_correct(prompt.kind, text, item):
            outcome = AnswerOutcome(INCORRECT, prompt, expected)
            if self.mode == REVIEW:
                self._schedule(item, False, outcome)
            self.state = AWAITING_RETRY
            return outcome

        outcome = AnswerOutcome(CORRECT, prompt, expected)
        self.session.results[index] = True
        if self.mode == REVIEW and self._item_fully_correct(prompt.item_index):
            self._level_up(item, outcome)
        elif self.mode == LEARNING and index == len(self.session.prompts) - 1 and all(self.session.results):
            for each in self.items:
                self._level_up(each, outcome)

        self.session.current_prompt_index += 1
        if self.session.current_prompt_index >= len(self.session.prompts):
            self._finish(outcome)
        return outcome

    def retry(self) -> None:
        if self.state != AWAITING_RETRY:
            raise SessionStateError(f"Nothing to retry in state {self.state}")
        self.state = AWAITING_ANSWER

    def restart(self) -> None:
        """Begin a fresh pass over the same kanji."""
        self._start()

    def unresolved_items(self) -> List[Any]:
        results = self.session.results
        return [
            item for index, item in enumerate(self.items)
            if not (results[index * 2] and results[index * 2 + 1])
        ]

    def summary(self) -> SessionSummary:
        results = self.session.results
        return SessionSummary(
            mode=self.mode,
            total_prompts=len(results),
            correct_prompts=sum(results),
            all_correct=all(results),
            leveled_ids=sorted(self.session.leveled_ids),
            missing_ids=list(self.missing_ids),
        )

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    def _item_fully_correct(self, item_index: int) -> bool:
        results = self.session.results
        return results[item_index * 2] and results[item_index * 2 + 1]

    def _finish(self, outcome: AnswerOutcome) -> None:
        self.state = COMPLETE
        outcome.complete = True

    def _level_up(self, item: Any, outcome: AnswerOutcome) -> None:
        if item.id in self.session.leveled_ids:
            return
        if self._schedule(item, True, outcome):
            self.session.leveled_ids.add(item.id)

    def _schedule(self, item: Any, correct: bool, outcome: AnswerOutcome) -> bool:
        """Run one scheduler step for a kanji and store it. False if the kanji is gone."""
        now = self.clock()
        try:
            current = self.store.load_item(item.id)
            new_level, next_review, new_is_learned = scheduler.advance(
                current.srs_level or 0, bool(current.is_learned), now, correct
            )
            self.store.save_progress(item.id, new_level, new_is_learned, next_review, now)
        except NotFound:
            if DEBUG_MODE:
                print(f"⚠️ Kanji {item.id} disappeared from the store; skipping its update")
            outcome.missing_ids.append(item.id)
            if item.id not in self.missing_ids:
                self.missing_ids.append(item.id)
            return False

        if DEBUG_MODE:
            verb = "Raising" if correct else "Lowering"
            print(f"{verb} kanji {item.id} to level {new_level}, next review {next_review}")
        outcome.scheduled.append((item.id, correct))
        return True
