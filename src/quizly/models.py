"""Data classes for the quiz domain model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

TIMEOUT = -1  # answer index recorded when the countdown runs out


class Category(Enum):
    SCIENCE = (1, "Science", "Test your knowledge of the natural world", "science")
    HISTORY = (2, "History", "Journey through time", "history")
    GEOGRAPHY = (3, "Geography", "Explore the world", "geography")
    LITERATURE = (4, "Literature", "Books and authors", "literature")
    VIDEO_GAMES = (5, "Video Games", "Gaming knowledge", "games")
    TECHNOLOGY = (6, "Technology", "Tech and programming", "technology")
    SPORTS = (7, "Sports", "Athletic competitions", "sports")
    FOOD = (8, "Food & Cooking", "Culinary delights", "food")
    ISLAM = (9, "Islam", "Islamic knowledge", "islam")
    AI_ETHICS = (10, "AI Ethics", "Ethical considerations in AI", "ai_ethics")
    RESPONSIBILITY_OF_SOCIAL_NETWORKS = (
        11, "Responsibility of Social Networks", "Social media ethics", "social_networks",
    )
    ETHICS_IN_IOT = (12, "Ethics in IoT", "Ethical issues in Internet of Things", "iot_ethics")
    DIGITAL_REVOLUTION = (13, "Digital Revolution", "Impact of digital technology", "digital_revolution")

    def __init__(self, id: int, display_name: str, description: str, slug: str):
        self.id = id
        self.display_name = display_name
        self.description = description
        self.slug = slug

    @classmethod
    def from_id(cls, category_id: int) -> "Category":
        for category in cls:
            if category.id == category_id:
                return category
        raise ValueError(f"Unknown category id: {category_id}")


class Difficulty(Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"

    @property
    def time_limit(self) -> int:
        """Seconds allowed to answer a question of this difficulty."""
        return {"EASY": 30, "MEDIUM": 45, "HARD": 60}[self.value]


@dataclass(frozen=True)
class AnswerOption:
    id: str
    text: str


@dataclass(frozen=True)
class Question:
    id: str
    category: Category
    text: str
    options: tuple
    correct_index: int
    correct_answer_id: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    explanation: Optional[str] = None
    tags: tuple = ()

    @property
    def time_limit(self) -> int:
        return self.difficulty.time_limit

    @property
    def correct_option(self) -> AnswerOption:
        return self.options[self.correct_index]


@dataclass(frozen=True)
class AnsweredQuestion:
    question: Question
    user_answer_index: int
    is_correct: bool
    time_spent: int  # seconds

    @property
    def timed_out(self) -> bool:
        return self.user_answer_index == TIMEOUT


@dataclass
class CategoryScore:
    category: Category
    total_score: int = 0
    best_score: int = 0
    attempts: int = 0
    correct_answers: int = 0
    total_questions: int = 0

    @property
    def accuracy(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return self.correct_answers / self.total_questions * 100

    @property
    def average_score(self) -> float:
        if self.attempts == 0:
            return 0.0
        return self.total_score / self.attempts


@dataclass
class LedgerTotals:
    total_score: int = 0
    total_quizzes: int = 0
    current_streak: int = 0
    best_streak: int = 0
    last_quiz_at: Optional[int] = None  # unix seconds

    @property
    def average_score(self) -> float:
        if self.total_quizzes == 0:
            return 0.0
        return self.total_score / self.total_quizzes


@dataclass
class QuizResult:
    category: Category
    total_questions: int
    correct_answers: int
    score: int
    time_spent: int
    max_streak: int = 0
    is_new_best: bool = False
    previous_best: int = 0
    answered_questions: list = field(default_factory=list)

    @property
    def percentage(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return self.correct_answers / self.total_questions * 100

    @property
    def incorrect_answers(self) -> int:
        return self.total_questions - self.correct_answers
