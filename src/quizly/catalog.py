"""Load the bundled question catalog into normalized Question records."""
import json
import logging
from pathlib import Path

import yaml

from quizly.errors import MalformedCatalogError, PersistenceError
from quizly.models import AnswerOption, Category, Difficulty, Question

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"
CATALOG_FILE = "questions.json"


def read_document(path) -> object:
    """Read a catalog document from disk, decoding it by file suffix.

    OSError propagates unchanged; undecodable content raises
    MalformedCatalogError.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    try:
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise MalformedCatalogError(f"{path.name}: {e}") from e


def _resolve_correct_index(question_id: str, options: list, correct_answer_id: str) -> int:
    for index, option in enumerate(options):
        if option.id == correct_answer_id:
            return index
    logger.warning(
        "Question %s: correct answer id %r matches no option, defaulting to index 0",
        question_id, correct_answer_id,
    )
    return 0


def parse_question(data: dict, category: Category) -> Question:
    """Convert one question definition into a Question owned by category."""
    try:
        options = [AnswerOption(id=str(o["id"]), text=str(o["text"])) for o in data["options"]]
        if len(options) < 2:
            raise MalformedCatalogError(f"Question {data['id']} has fewer than two options")
        difficulty = Difficulty(data["difficulty"])
        correct_answer_id = str(data["correctAnswerId"])
        tags = data.get("tags") or []
        if not isinstance(tags, list):
            raise MalformedCatalogError(f"Question {data['id']}: tags must be a list")
        return Question(
            id=str(data["id"]),
            category=category,
            text=str(data["text"]),
            options=tuple(options),
            correct_index=_resolve_correct_index(str(data["id"]), options, correct_answer_id),
            correct_answer_id=correct_answer_id,
            difficulty=difficulty,
            explanation=data.get("explanation"),
            tags=tuple(str(t) for t in tags),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedCatalogError(f"Invalid question definition: {e!r}") from e


def _parse_category(data: dict) -> Category:
    try:
        return Category.from_id(int(data["id"]))
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedCatalogError(f"Invalid category: {e!r}") from e


def load_catalog(document) -> list[Question]:
    """Flatten a catalog document (categories -> questions) into Question records.

    Raises MalformedCatalogError if the document does not have the expected
    shape. Either every question is returned or none is.
    """
    if not isinstance(document, dict):
        raise MalformedCatalogError("Catalog document must be an object")
    for key in ("version", "lastUpdated", "categories"):
        if key not in document:
            raise MalformedCatalogError(f"Catalog document is missing {key!r}")
    categories = document["categories"]
    if not isinstance(categories, list):
        raise MalformedCatalogError("'categories' must be a list")

    questions = []
    for entry in categories:
        if not isinstance(entry, dict) or not isinstance(entry.get("questions"), list):
            raise MalformedCatalogError("Each category needs a 'questions' list")
        category = _parse_category(entry)
        questions.extend(parse_question(q, category) for q in entry["questions"])

    seen = set()
    for q in questions:
        if q.id in seen:
            raise MalformedCatalogError(f"Duplicate question id: {q.id}")
        seen.add(q.id)

    logger.debug("Parsed %d categories, %d questions", len(categories), len(questions))
    return questions


def load_bundled_catalog(path=None) -> list[Question]:
    """Read and parse the full catalog (defaults to the bundled questions.json)."""
    path = Path(path) if path else CONTENT_DIR / CATALOG_FILE
    return load_catalog(read_document(path))


def load_category(category: Category, content_dir=None) -> list[Question]:
    """Load the optional per-category document, or [] if there is none.

    The document may be a full catalog document, in which case only the
    matching category is used, or a bare list of question definitions.
    """
    content_dir = Path(content_dir) if content_dir else CONTENT_DIR
    path = content_dir / f"{category.slug}.json"
    if not path.exists():
        logger.debug("No category document for %s", category.name)
        return []
    document = read_document(path)
    if isinstance(document, list):
        return [parse_question(q, category) for q in document]
    return [q for q in load_catalog(document) if q.category is category]


def reload_catalog(store, path=None) -> int:
    """Replace the whole question store with the catalog on disk.

    Returns the number of installed questions, or -1 if the catalog could
    not be read or installed. On failure the store keeps its prior contents.
    """
    logger.info("Reloading questions from catalog...")
    try:
        questions = load_bundled_catalog(path)
        store.replace_all(questions)
    except (MalformedCatalogError, PersistenceError, OSError) as e:
        logger.error("Failed to reload questions from catalog: %s", e)
        return -1
    logger.info("Successfully reloaded %d questions", len(questions))
    return len(questions)


def seed_if_empty(store, path=None) -> bool:
    """Load the catalog only when the store holds no questions.

    For embedders that want a one-time install; the CLI reloads on every start.
    """
    count = store.count_all()
    if count > 0:
        logger.debug("Store already contains %d questions", count)
        return False
    return reload_catalog(store, path) >= 0
