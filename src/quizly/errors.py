"""Exception types raised by the catalog, store, ledger and engine."""


class QuizlyError(Exception):
    """Base class for all quizly errors."""


class MalformedCatalogError(QuizlyError):
    """The catalog document does not have the expected shape."""


class EmptyCategoryError(QuizlyError):
    """No questions are available for the requested category."""

    def __init__(self, category):
        self.category = category
        super().__init__(f"No questions available for category {category.display_name}")


class PersistenceError(QuizlyError):
    """A write to the question store or score ledger failed and was rolled back."""
