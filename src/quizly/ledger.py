"""Score ledger: aggregate and per-category statistics in a key/value table."""
import logging
import time

from quizly.db import get_connection, transaction
from quizly.models import Category, CategoryScore, LedgerTotals

logger = logging.getLogger(__name__)

TOTAL_SCORE = "total_score"
TOTAL_QUIZZES = "total_quizzes"
CURRENT_STREAK = "current_streak"
BEST_STREAK = "best_streak"
LAST_QUIZ_AT = "last_quiz_at"

_ADD = "INSERT INTO score_ledger (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = value + excluded.value"
_SET = "INSERT INTO score_ledger (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = excluded.value"
_MAX = "INSERT INTO score_ledger (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = MAX(value, excluded.value)"

CATEGORY_FIELDS = ("score", "best", "attempts", "correct", "total")


def category_key(field: str, category: Category) -> str:
    return f"category_{field}_{category.name}"


def _category_score(values: dict, category: Category) -> CategoryScore:
    return CategoryScore(
        category=category,
        total_score=values[category_key("score", category)],
        best_score=values[category_key("best", category)],
        attempts=values[category_key("attempts", category)],
        correct_answers=values[category_key("correct", category)],
        total_questions=values[category_key("total", category)],
    )


class ScoreLedger:
    """Persistent accumulation of quiz results.

    Every mutation is a single transaction, so a reader sees either all of
    a recorded result or none of it.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _read(self, keys: list[str]) -> dict:
        conn = get_connection(self.db_path)
        placeholders = ", ".join("?" for _ in keys)
        rows = conn.execute(
            f"SELECT key, value FROM score_ledger WHERE key IN ({placeholders})", keys
        ).fetchall()
        conn.close()
        values = {k: 0 for k in keys}
        values.update({row["key"]: row["value"] for row in rows})
        return values

    def record_result(
        self,
        category: Category,
        score: int,
        correct_answers: int,
        total_questions: int,
        is_new_best: bool,
    ) -> int:
        """Add one finished quiz to the totals. Returns the category best afterwards.

        When is_new_best is set the best score is raised to score, but never
        lowered: the comparison happens inside the transaction.
        """
        best_key = category_key("best", category)
        with transaction(self.db_path) as conn:
            conn.executemany(_ADD, [
                (TOTAL_SCORE, score),
                (TOTAL_QUIZZES, 1),
                (category_key("score", category), score),
                (category_key("attempts", category), 1),
                (category_key("correct", category), correct_answers),
                (category_key("total", category), total_questions),
            ])
            if is_new_best:
                conn.execute(_MAX, (best_key, score))
            conn.execute(_SET, (LAST_QUIZ_AT, int(time.time())))
            row = conn.execute("SELECT value FROM score_ledger WHERE key = ?", (best_key,)).fetchone()
        best = row["value"] if row else 0
        logger.debug("Recorded %s result: score=%d best=%d", category.name, score, best)
        return best

    def update_streak(self, new_streak: int) -> None:
        with transaction(self.db_path) as conn:
            conn.execute(_SET, (CURRENT_STREAK, new_streak))
            conn.execute(_MAX, (BEST_STREAK, new_streak))

    def get_category_best(self, category: Category) -> int:
        key = category_key("best", category)
        return self._read([key])[key]

    def get_category_stats(self, category: Category) -> CategoryScore:
        values = self._read([category_key(f, category) for f in CATEGORY_FIELDS])
        return _category_score(values, category)

    def get_all_category_stats(self) -> list[CategoryScore]:
        """One entry per category, zero-valued if never attempted."""
        keys = [category_key(f, c) for c in Category for f in CATEGORY_FIELDS]
        values = self._read(keys)
        return [_category_score(values, category) for category in Category]

    def get_totals(self) -> LedgerTotals:
        values = self._read([TOTAL_SCORE, TOTAL_QUIZZES, CURRENT_STREAK, BEST_STREAK, LAST_QUIZ_AT])
        return LedgerTotals(
            total_score=values[TOTAL_SCORE],
            total_quizzes=values[TOTAL_QUIZZES],
            current_streak=values[CURRENT_STREAK],
            best_streak=values[BEST_STREAK],
            last_quiz_at=values[LAST_QUIZ_AT] or None,
        )

    def clear_all(self) -> None:
        """Reset every counter. Only for explicit user-initiated resets."""
        with transaction(self.db_path) as conn:
            conn.execute("DELETE FROM score_ledger")
        logger.info("Score ledger cleared")
