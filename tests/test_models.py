"""Tests for data model classes."""
import pytest

from quizly.models import (
    TIMEOUT, AnsweredQuestion, Category, CategoryScore, Difficulty,
    LedgerTotals, QuizResult,
)
from factories import make_question


def test_difficulty_time_limits():
    assert Difficulty.EASY.time_limit == 30
    assert Difficulty.MEDIUM.time_limit == 45
    assert Difficulty.HARD.time_limit == 60


def test_question_time_limit_follows_difficulty():
    q = make_question("q1", difficulty=Difficulty.HARD)
    assert q.time_limit == 60


def test_question_correct_option():
    q = make_question("q1", correct_index=2)
    assert q.correct_option.id == "C"


def test_category_from_id():
    assert Category.from_id(1) is Category.SCIENCE
    assert Category.from_id(13) is Category.DIGITAL_REVOLUTION


def test_category_from_unknown_id():
    with pytest.raises(ValueError):
        Category.from_id(99)


def test_category_ids_are_unique():
    ids = [c.id for c in Category]
    assert len(ids) == len(set(ids))


def test_category_display_name():
    assert Category.FOOD.display_name == "Food & Cooking"


def test_answered_question_timed_out():
    q = make_question("q1")
    answered = AnsweredQuestion(question=q, user_answer_index=TIMEOUT, is_correct=False, time_spent=30)
    assert answered.timed_out


def test_category_score_defaults():
    s = CategoryScore(category=Category.HISTORY)
    assert s.total_score == 0
    assert s.accuracy == 0.0
    assert s.average_score == 0.0


def test_category_score_derived_values():
    s = CategoryScore(
        category=Category.HISTORY, total_score=40, best_score=40,
        attempts=1, correct_answers=4, total_questions=10,
    )
    assert s.accuracy == 40.0
    assert s.average_score == 40.0


def test_ledger_totals_average():
    assert LedgerTotals().average_score == 0.0
    assert LedgerTotals(total_score=90, total_quizzes=3).average_score == 30.0


def test_quiz_result_percentage():
    r = QuizResult(category=Category.SCIENCE, total_questions=4, correct_answers=3, score=30, time_spent=20)
    assert r.percentage == 75.0
    assert r.incorrect_answers == 1


def test_quiz_result_empty():
    r = QuizResult(category=Category.SCIENCE, total_questions=0, correct_answers=0, score=0, time_spent=0)
    assert r.percentage == 0.0
