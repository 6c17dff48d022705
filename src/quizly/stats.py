"""Achievement tiers, badges and summaries derived from the score ledger."""
from dataclasses import dataclass
from enum import Enum

from quizly.models import CategoryScore, LedgerTotals, QuizResult


class AchievementLevel(Enum):
    OUTSTANDING = (1, "Outstanding!", "🌟")
    EXCELLENT = (2, "Excellent!", "🎉")
    GREAT = (3, "Great Job!", "👏")
    GOOD = (4, "Good Effort!", "💪")
    KEEP_PRACTICING = (5, "Keep Practicing!", "📚")

    def __init__(self, tier: int, title: str, emoji: str):
        self.tier = tier
        self.title = title
        self.emoji = emoji


@dataclass(frozen=True)
class Badge:
    id: str
    title: str
    description: str
    icon: str
    is_unlocked: bool


def percentage(correct: int, total: int) -> float:
    if total == 0:
        return 0.0
    return correct / total * 100


def get_achievement_level(pct: float) -> AchievementLevel:
    if pct >= 90:
        return AchievementLevel.OUTSTANDING
    elif pct >= 75:
        return AchievementLevel.EXCELLENT
    elif pct >= 60:
        return AchievementLevel.GREAT
    elif pct >= 50:
        return AchievementLevel.GOOD
    return AchievementLevel.KEEP_PRACTICING


def best_category(scores: list[CategoryScore]) -> CategoryScore | None:
    """Highest-accuracy category among those attempted at least once."""
    attempted = [s for s in scores if s.attempts > 0]
    if not attempted:
        return None
    return max(attempted, key=lambda s: s.accuracy)


def evaluate_badges(totals: LedgerTotals, scores: list[CategoryScore]) -> list[Badge]:
    """Badge list with unlock state computed from the current ledger values.

    Nothing here is persisted; badges are re-derived every time.
    """
    quizzes = totals.total_quizzes
    points = totals.total_score
    streak = totals.best_streak
    return [
        Badge("first_quiz", "First Steps", "Complete your first quiz", "🎯", quizzes >= 1),
        Badge("quiz_10", "Dedicated Learner", "Complete 10 quizzes", "📚", quizzes >= 10),
        Badge("quiz_50", "Quiz Master", "Complete 50 quizzes", "🎓", quizzes >= 50),
        Badge("quiz_100", "Century Club", "Complete 100 quizzes", "💯", quizzes >= 100),
        Badge("score_100", "Century Scorer", "Score 100+ points", "⭐", points >= 100),
        Badge("score_500", "Rising Star", "Score 500+ points", "🌟", points >= 500),
        Badge("score_1000", "Point Millionaire", "Score 1000+ points", "💎", points >= 1000),
        Badge("streak_3", "On Fire", "Maintain a 3-day streak", "🔥", streak >= 3),
        Badge("streak_7", "Week Warrior", "Maintain a 7-day streak", "⚡", streak >= 7),
        Badge("streak_30", "Unstoppable", "Maintain a 30-day streak", "👑", streak >= 30),
        Badge(
            "category_master", "Category Master", "90%+ accuracy in any category", "🏆",
            any(s.accuracy >= 90 and s.attempts >= 5 for s in scores),
        ),
        Badge(
            "all_categories", "Well Rounded", "Complete quizzes in all categories", "🌈",
            bool(scores) and all(s.attempts > 0 for s in scores),
        ),
    ]


def build_results_summary(ledger, result: QuizResult) -> dict:
    """Everything the results screen shows for a just-finished quiz."""
    scores = ledger.get_all_category_stats()
    pct = percentage(result.correct_answers, result.total_questions)
    best = best_category(scores)
    return {
        "category": result.category,
        "score": result.score,
        "correct_answers": result.correct_answers,
        "incorrect_answers": result.incorrect_answers,
        "total_questions": result.total_questions,
        "max_streak": result.max_streak,
        "percentage": round(pct, 1),
        "achievement": get_achievement_level(pct),
        "is_new_best": result.is_new_best,
        "previous_best": result.previous_best,
        "best_category": best.category if best else None,
        "time_spent": result.time_spent,
    }


def build_stats_overview(ledger) -> dict:
    totals = ledger.get_totals()
    scores = ledger.get_all_category_stats()
    badges = evaluate_badges(totals, scores)
    return {
        "total_score": totals.total_score,
        "total_quizzes": totals.total_quizzes,
        "current_streak": totals.current_streak,
        "best_streak": totals.best_streak,
        "average_score": round(totals.average_score, 1),
        "category_scores": [s for s in scores if s.attempts > 0],
        "all_category_scores": scores,
        "unlocked_badges": [b for b in badges if b.is_unlocked],
        "locked_badges": [b for b in badges if not b.is_unlocked],
    }
