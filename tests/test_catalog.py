# tests/test_catalog.py
import json

import pytest

from quizly.catalog import (
    load_bundled_catalog, load_catalog, load_category, read_document,
    reload_catalog, seed_if_empty,
)
from quizly.errors import MalformedCatalogError
from quizly.models import Category, Difficulty
from quizly.store import QuestionStore


def question_def(qid, correct="A", difficulty="EASY", options=("A", "B", "C", "D")):
    return {
        "id": qid,
        "text": f"Question {qid}?",
        "options": [{"id": o, "text": f"Option {o}"} for o in options],
        "correctAnswerId": correct,
        "difficulty": difficulty,
        "explanation": None,
        "tags": ["general"],
    }


def catalog_doc(*categories):
    return {
        "version": 1,
        "lastUpdated": "2026-01-01",
        "categories": [
            {"id": cid, "name": "n", "icon": "i", "color": "#000", "questions": qs}
            for cid, qs in categories
        ],
    }


def test_load_catalog_flattens_categories():
    doc = catalog_doc((1, [question_def("s1"), question_def("s2")]), (2, [question_def("h1")]))
    questions = load_catalog(doc)
    assert [q.id for q in questions] == ["s1", "s2", "h1"]
    assert questions[0].category is Category.SCIENCE
    assert questions[2].category is Category.HISTORY


def test_load_catalog_resolves_correct_index():
    questions = load_catalog(catalog_doc((1, [question_def("s1", correct="C")])))
    assert questions[0].correct_index == 2
    assert questions[0].correct_answer_id == "C"


def test_unmatched_correct_answer_defaults_to_first_option():
    questions = load_catalog(catalog_doc((1, [question_def("s1", correct="Z")])))
    assert questions[0].correct_index == 0


def test_load_catalog_maps_difficulty_and_tags():
    q = load_catalog(catalog_doc((1, [question_def("s1", difficulty="HARD")])))[0]
    assert q.difficulty is Difficulty.HARD
    assert q.time_limit == 60
    assert q.tags == ("general",)


def test_load_catalog_rejects_non_object():
    with pytest.raises(MalformedCatalogError):
        load_catalog([])


def test_load_catalog_rejects_missing_version():
    doc = catalog_doc((1, [question_def("s1")]))
    del doc["version"]
    with pytest.raises(MalformedCatalogError):
        load_catalog(doc)


def test_load_catalog_rejects_missing_question_field():
    bad = question_def("s1")
    del bad["text"]
    with pytest.raises(MalformedCatalogError):
        load_catalog(catalog_doc((1, [question_def("s0"), bad])))


def test_load_catalog_rejects_unknown_difficulty():
    with pytest.raises(MalformedCatalogError):
        load_catalog(catalog_doc((1, [question_def("s1", difficulty="IMPOSSIBLE")])))


def test_load_catalog_rejects_unknown_category():
    with pytest.raises(MalformedCatalogError):
        load_catalog(catalog_doc((42, [question_def("x1")])))


def test_load_catalog_rejects_single_option_question():
    with pytest.raises(MalformedCatalogError):
        load_catalog(catalog_doc((1, [question_def("s1", options=("A",))])))


def test_load_catalog_rejects_duplicate_ids():
    with pytest.raises(MalformedCatalogError):
        load_catalog(catalog_doc((1, [question_def("dup")]), (2, [question_def("dup")])))


def test_read_json_document(tmp_path):
    f = tmp_path / "catalog.json"
    f.write_text(json.dumps(catalog_doc((1, [question_def("s1")]))))
    assert read_document(f)["version"] == 1


def test_read_yaml_document(tmp_path):
    f = tmp_path / "catalog.yaml"
    f.write_text(
        "version: 1\n"
        "lastUpdated: '2026-01-01'\n"
        "categories:\n"
        "  - id: 3\n"
        "    name: Geography\n"
        "    icon: public\n"
        "    color: '#2196F3'\n"
        "    questions:\n"
        "      - id: g1\n"
        "        text: Capital of France?\n"
        "        options:\n"
        "          - {id: A, text: Paris}\n"
        "          - {id: B, text: Lyon}\n"
        "        correctAnswerId: A\n"
        "        difficulty: EASY\n"
        "        explanation: null\n"
        "        tags: []\n"
    )
    questions = load_catalog(read_document(f))
    assert questions[0].category is Category.GEOGRAPHY
    assert questions[0].options[0].text == "Paris"


def test_read_invalid_json_raises(tmp_path):
    f = tmp_path / "broken.json"
    f.write_text("{not json")
    with pytest.raises(MalformedCatalogError):
        read_document(f)


def test_read_missing_file_propagates_os_error(tmp_path):
    with pytest.raises(OSError):
        read_document(tmp_path / "missing.json")


def test_bundled_catalog_loads():
    questions = load_bundled_catalog()
    assert len(questions) >= 30
    assert len({q.id for q in questions}) == len(questions)
    assert all(0 <= q.correct_index < len(q.options) for q in questions)
    assert sum(1 for q in questions if q.category is Category.SCIENCE) > 10


def test_bundled_catalog_covers_every_category():
    covered = {q.category for q in load_bundled_catalog()}
    assert covered == set(Category)


def test_load_category_missing_document_returns_empty(tmp_path):
    assert load_category(Category.SCIENCE, content_dir=tmp_path) == []


def test_load_category_from_question_array(tmp_path):
    (tmp_path / "history.json").write_text(json.dumps([question_def("h1"), question_def("h2", correct="B")]))
    questions = load_category(Category.HISTORY, content_dir=tmp_path)
    assert [q.id for q in questions] == ["h1", "h2"]
    assert all(q.category is Category.HISTORY for q in questions)
    assert questions[1].correct_index == 1


def test_load_category_from_full_document(tmp_path):
    doc = catalog_doc((1, [question_def("s1")]), (2, [question_def("h1")]))
    (tmp_path / "science.json").write_text(json.dumps(doc))
    questions = load_category(Category.SCIENCE, content_dir=tmp_path)
    assert [q.id for q in questions] == ["s1"]


def test_reload_catalog_installs_questions(ready_db, tmp_path):
    f = tmp_path / "questions.json"
    f.write_text(json.dumps(catalog_doc((1, [question_def("s1"), question_def("s2")]))))
    store = QuestionStore(ready_db)
    assert reload_catalog(store, f) == 2
    assert store.count_all() == 2


def test_reload_catalog_keeps_existing_store_on_malformed_document(ready_db, tmp_path):
    store = QuestionStore(ready_db)
    good = tmp_path / "good.json"
    good.write_text(json.dumps(catalog_doc((1, [question_def("s1")]))))
    reload_catalog(store, good)

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"version": 2, "categories": "nope"}))
    assert reload_catalog(store, bad) == -1
    assert [q.id for q in store.get_by_category(Category.SCIENCE)] == ["s1"]


def test_reload_catalog_missing_file_keeps_store(ready_db, tmp_path):
    store = QuestionStore(ready_db)
    assert reload_catalog(store, tmp_path / "missing.json") == -1
    assert store.count_all() == 0


def test_reload_catalog_replaces_previous_catalog(ready_db, tmp_path):
    store = QuestionStore(ready_db)
    first = tmp_path / "first.json"
    first.write_text(json.dumps(catalog_doc((1, [question_def("old1"), question_def("old2")]))))
    second = tmp_path / "second.json"
    second.write_text(json.dumps(catalog_doc((2, [question_def("new1")]))))
    reload_catalog(store, first)
    reload_catalog(store, second)
    assert store.count_all() == 1
    assert store.get_by_id("old1") is None


def test_seed_if_empty(ready_db):
    store = QuestionStore(ready_db)
    assert seed_if_empty(store) is True
    count = store.count_all()
    assert count > 0
    assert seed_if_empty(store) is False
    assert store.count_all() == count
