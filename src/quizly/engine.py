"""Quiz session engine: question progression, countdown, scoring and streaks.

State lifecycle:
    start(category)  -> LOADING, draws the questions, then ACTIVE at index 0
                        with the first countdown armed (or ERROR when the
                        category has no questions).
    submit_answer(i) -> scores the current question once, disarms the
                        countdown and schedules the post-answer advance.
    advance          -> next question with a fresh countdown, or COMPLETE
                        after the result is written to the score ledger.
    restart()        -> throws the session away and starts over.

Timers run on an injected scheduler. Every scheduled callback carries the
session generation and question index it was armed for, and is ignored if
either has moved on by the time it fires.
"""
import logging
import random
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from quizly.errors import EmptyCategoryError, MalformedCatalogError
from quizly.models import TIMEOUT, AnsweredQuestion, Category, Question, QuizResult

logger = logging.getLogger(__name__)

NO_QUESTIONS_MESSAGE = "No questions available for this category"


class Status(Enum):
    LOADING = "loading"
    ACTIVE = "active"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class EngineConfig:
    question_count: int = 10
    points_per_correct: int = 10
    advance_delay: float = 2.5  # seconds of answer feedback before moving on
    tick_interval: float = 1.0


@dataclass(frozen=True)
class QuizState:
    """Immutable snapshot of a quiz session, safe to hand to a renderer."""
    status: Status = Status.LOADING
    category: Optional[Category] = None
    questions: tuple = ()
    current_index: int = 0
    time_remaining: int = 0
    score: int = 0
    current_streak: int = 0
    max_streak: int = 0
    is_answered: bool = False
    selected_answer_index: Optional[int] = None
    is_correct: Optional[bool] = None
    answered_questions: tuple = ()
    error: Optional[str] = None
    is_new_personal_best: bool = False
    previous_best_score: int = 0

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def correct_answers(self) -> int:
        return sum(1 for a in self.answered_questions if a.is_correct)

    @property
    def is_loading(self) -> bool:
        return self.status is Status.LOADING

    @property
    def is_complete(self) -> bool:
        return self.status is Status.COMPLETE


class ThreadingScheduler:
    """Runs callbacks on background threads via threading.Timer."""

    def call_later(self, delay: float, callback: Callable[[], None]):
        def run():
            try:
                callback()
            except Exception:
                logger.exception("Scheduled quiz callback failed")

        timer = threading.Timer(delay, run)
        timer.daemon = True
        timer.start()
        return timer


def random_category(rng=None) -> Category:
    """Pick a category for a quick-start quiz."""
    return (rng or random).choice(list(Category))


class QuizEngine:
    def __init__(
        self,
        store,
        ledger,
        scheduler=None,
        config: Optional[EngineConfig] = None,
        rng: Optional[random.Random] = None,
        fallback: Optional[Callable[[Category], list]] = None,
        feedback: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self.ledger = ledger
        self.scheduler = scheduler or ThreadingScheduler()
        self.config = config or EngineConfig()
        self.rng = rng or random.Random()
        self.fallback = fallback
        self.feedback = feedback
        self._lock = threading.RLock()
        self._listeners: list = []
        self._state = QuizState()
        self._category: Optional[Category] = None
        self._category_best = 0
        self._generation = 0
        self._tick_handle = None
        self._advance_handle = None

    # --- observation ---------------------------------------------------

    @property
    def state(self) -> QuizState:
        with self._lock:
            return self._state

    def subscribe(self, listener: Callable[[QuizState], None]) -> Callable[[], None]:
        """Call listener with a fresh snapshot after every change. Returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: QuizState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _update(self, **changes) -> None:
        self._set_state(replace(self._state, **changes))

    def _emit(self, event: str) -> None:
        if self.feedback is not None:
            self.feedback(event)

    # --- timers --------------------------------------------------------

    def _cancel_timers(self) -> None:
        for handle in (self._tick_handle, self._advance_handle):
            if handle is not None:
                handle.cancel()
        self._tick_handle = None
        self._advance_handle = None

    def _arm_countdown(self) -> None:
        generation, index = self._generation, self._state.current_index
        self._tick_handle = self.scheduler.call_later(
            self.config.tick_interval, lambda: self._tick(generation, index)
        )

    def _is_current(self, generation: int, index: int) -> bool:
        return (
            generation == self._generation
            and self._state.status is Status.ACTIVE
            and self._state.current_index == index
        )

    def _tick(self, generation: int, index: int) -> None:
        with self._lock:
            if not self._is_current(generation, index) or self._state.is_answered:
                return
            remaining = max(self._state.time_remaining - 1, 0)
            self._update(time_remaining=remaining)
            if remaining == 0:
                logger.debug("Question %d timed out", index)
                self.submit_answer(TIMEOUT)
            else:
                self._arm_countdown()

    # --- commands ------------------------------------------------------

    def _draw_questions(self, category: Category) -> list:
        limit = self.config.question_count
        questions = self.store.draw(category, limit, self.rng)
        if not questions and self.fallback is not None:
            try:
                pool = self.fallback(category)
            except (MalformedCatalogError, OSError) as e:
                logger.error("Fallback questions for %s could not be loaded: %s", category.name, e)
                pool = []
            questions = self.rng.sample(pool, min(limit, len(pool)))
        if not questions:
            raise EmptyCategoryError(category)
        return questions

    def start(self, category: Category) -> None:
        with self._lock:
            self._cancel_timers()
            self._generation += 1
            self._category = category
            self._set_state(QuizState(status=Status.LOADING, category=category))
            try:
                questions = self._draw_questions(category)
            except EmptyCategoryError as e:
                logger.warning("%s", e)
                self._update(status=Status.ERROR, error=NO_QUESTIONS_MESSAGE)
                return
            self._category_best = self.ledger.get_category_best(category)
            logger.debug("Starting %s quiz with %d questions", category.name, len(questions))
            self._update(
                status=Status.ACTIVE,
                questions=tuple(questions),
                current_index=0,
                time_remaining=questions[0].time_limit,
                previous_best_score=self._category_best,
            )
            self._arm_countdown()

    def submit_answer(self, answer_index: int, question_index: Optional[int] = None) -> None:
        """Score the current question. Ignored if it has already been answered.

        Pass question_index when the answer was given for a question shown
        earlier; it is dropped if the session has since moved on.
        """
        with self._lock:
            state = self._state
            if state.status is not Status.ACTIVE or state.is_answered:
                return
            if question_index is not None and question_index != state.current_index:
                logger.debug("Dropping answer for question %d, now at %d", question_index, state.current_index)
                return
            self._cancel_timers()
            question = state.current_question
            is_correct = answer_index != TIMEOUT and answer_index == question.correct_index
            answered = AnsweredQuestion(
                question=question,
                user_answer_index=answer_index,
                is_correct=is_correct,
                time_spent=question.time_limit - state.time_remaining,
            )
            streak = state.current_streak + 1 if is_correct else 0
            self._update(
                is_answered=True,
                selected_answer_index=answer_index,
                is_correct=is_correct,
                score=state.score + (self.config.points_per_correct if is_correct else 0),
                current_streak=streak,
                max_streak=max(state.max_streak, streak),
                answered_questions=state.answered_questions + (answered,),
            )
            self._emit("correct" if is_correct else "incorrect")
            generation, index = self._generation, state.current_index
            self._advance_handle = self.scheduler.call_later(
                self.config.advance_delay, lambda: self._advance(generation, index)
            )

    def _advance(self, generation: int, index: int) -> None:
        with self._lock:
            if not self._is_current(generation, index) or not self._state.is_answered:
                return
            self._advance_handle = None
            next_index = index + 1
            if next_index >= self._state.question_count:
                self._complete()
                return
            self._update(
                current_index=next_index,
                is_answered=False,
                selected_answer_index=None,
                is_correct=None,
                time_remaining=self._state.questions[next_index].time_limit,
            )
            self._arm_countdown()

    def _complete(self) -> None:
        state = self._state
        is_new_best = state.score > self._category_best
        self.ledger.record_result(
            category=state.category,
            score=state.score,
            correct_answers=state.correct_answers,
            total_questions=state.question_count,
            is_new_best=is_new_best,
        )
        self._emit("complete")
        logger.debug("Quiz complete: %s scored %d", state.category.name, state.score)
        self._update(status=Status.COMPLETE, is_new_personal_best=is_new_best)

    def restart(self) -> None:
        """Discard the current session and start the same category with a fresh draw."""
        with self._lock:
            if self._category is None:
                raise RuntimeError("restart() called before start()")
            self.start(self._category)

    def cancel(self) -> None:
        """Stop all pending timers, e.g. when the quiz screen is left."""
        with self._lock:
            self._generation += 1
            self._cancel_timers()

    def result(self) -> Optional[QuizResult]:
        """Summary of the finished session, or None if it is not complete."""
        state = self.state
        if state.status is not Status.COMPLETE:
            return None
        return QuizResult(
            category=state.category,
            total_questions=state.question_count,
            correct_answers=state.correct_answers,
            score=state.score,
            time_spent=sum(a.time_spent for a in state.answered_questions),
            max_streak=state.max_streak,
            is_new_best=state.is_new_personal_best,
            previous_best=state.previous_best_score,
            answered_questions=list(state.answered_questions),
        )
