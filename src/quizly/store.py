"""Local question store backed by the questions table."""
import json
import random

from quizly.db import get_connection, transaction
from quizly.models import AnswerOption, Category, Difficulty, Question

DEFAULT_QUESTION_LIMIT = 10


def _row_to_question(row) -> Question:
    options = tuple(AnswerOption(id=o["id"], text=o["text"]) for o in json.loads(row["options_json"]))
    return Question(
        id=row["id"],
        category=Category.from_id(row["category_id"]),
        text=row["text"],
        options=options,
        correct_index=row["correct_index"] if 0 <= row["correct_index"] < len(options) else 0,
        correct_answer_id=row["correct_answer_id"],
        difficulty=Difficulty(row["difficulty"]),
        explanation=row["explanation"],
        tags=tuple(json.loads(row["tags_json"])),
    )


def _question_params(q: Question) -> tuple:
    return (
        q.id,
        q.category.id,
        q.text,
        json.dumps([{"id": o.id, "text": o.text} for o in q.options]),
        q.correct_answer_id,
        q.correct_index,
        q.difficulty.value,
        q.explanation,
        json.dumps(list(q.tags)),
    )


class QuestionStore:
    """Queryable collection of questions keyed by id.

    Questions are immutable once stored; the only way to change them is a
    full replace_all (or dropping a category).
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def get_by_category(self, category: Category) -> list[Question]:
        conn = get_connection(self.db_path)
        rows = conn.execute(
            "SELECT * FROM questions WHERE category_id = ? ORDER BY id", (category.id,)
        ).fetchall()
        conn.close()
        return [_row_to_question(r) for r in rows]

    def get_by_category_and_difficulty(self, category: Category, difficulty: Difficulty) -> list[Question]:
        conn = get_connection(self.db_path)
        rows = conn.execute(
            "SELECT * FROM questions WHERE category_id = ? AND difficulty = ? ORDER BY id",
            (category.id, difficulty.value),
        ).fetchall()
        conn.close()
        return [_row_to_question(r) for r in rows]

    def get_by_id(self, question_id: str) -> Question | None:
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT * FROM questions WHERE id = ?", (question_id,)).fetchone()
        conn.close()
        return _row_to_question(row) if row else None

    def count_by_category(self, category: Category) -> int:
        conn = get_connection(self.db_path)
        count = conn.execute(
            "SELECT COUNT(*) FROM questions WHERE category_id = ?", (category.id,)
        ).fetchone()[0]
        conn.close()
        return count

    def count_all(self) -> int:
        conn = get_connection(self.db_path)
        count = conn.execute("SELECT COUNT(*) FROM questions").fetchone()[0]
        conn.close()
        return count

    def get_category_counts(self) -> dict:
        """Question count for every category, including empty ones."""
        conn = get_connection(self.db_path)
        rows = conn.execute(
            "SELECT category_id, COUNT(*) as total FROM questions GROUP BY category_id"
        ).fetchall()
        conn.close()
        counts = {category: 0 for category in Category}
        for row in rows:
            counts[Category.from_id(row["category_id"])] = row["total"]
        return counts

    def replace_all(self, questions: list[Question]) -> None:
        """Delete every stored question and insert the new set in one transaction."""
        with transaction(self.db_path) as conn:
            conn.execute("DELETE FROM questions")
            conn.executemany(
                """INSERT OR REPLACE INTO questions
                (id, category_id, text, options_json, correct_answer_id, correct_index,
                 difficulty, explanation, tags_json)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                [_question_params(q) for q in questions],
            )

    def delete_by_category(self, category: Category) -> None:
        with transaction(self.db_path) as conn:
            conn.execute("DELETE FROM questions WHERE category_id = ?", (category.id,))

    def draw(self, category: Category, limit: int = DEFAULT_QUESTION_LIMIT, rng=None) -> list[Question]:
        """Random sample of up to limit questions from the category, without replacement."""
        rng = rng or random
        pool = self.get_by_category(category)
        return rng.sample(pool, min(limit, len(pool)))
