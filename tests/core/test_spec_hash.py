"""Spec hash tests — canonical JSON and sha256 content hashing.

Tests cover:
    - Key-order independence at every nesting level
    - Array order is significant
    - Any leaf change changes the hash
    - A model and its wire dict hash identically
"""

from learnloop.core.spec_hash import canonical_json, canonicalize, compute_spec_hash
from tests.factories import make_lesson


def test_canonicalize_sorts_nested_keys():
    assert list(canonicalize({"b": 1, "a": {"d": 2, "c": 3}})) == ["a", "b"]
    assert canonical_json({"b": 1, "a": {"d": 2, "c": 3}}) == '{"a":{"c":3,"d":2},"b":1}'


def test_hash_stable_under_key_reordering():
    first = {"title": "x", "stages": {"plan": [1, 2], "do": []}}
    second = {"stages": {"do": [], "plan": [1, 2]}, "title": "x"}
    assert compute_spec_hash(first) == compute_spec_hash(second)


def test_array_order_is_significant():
    assert compute_spec_hash({"blocks": [1, 2]}) != compute_spec_hash({"blocks": [2, 1]})


def test_leaf_change_changes_hash():
    lesson = make_lesson()
    changed = make_lesson(title="Intro to Loops!")
    assert compute_spec_hash(lesson) != compute_spec_hash(changed)


def test_nested_leaf_change_changes_hash():
    data = make_lesson().to_wire()
    before = compute_spec_hash(data)
    data["stages"]["do"]["blocks"][0]["hints"][2] = "Return the total"
    assert compute_spec_hash(data) != before


def test_model_and_wire_dict_hash_identically():
    lesson = make_lesson()
    assert compute_spec_hash(lesson) == compute_spec_hash(lesson.to_wire())


def test_hash_is_sha256_hex():
    digest = compute_spec_hash(make_lesson())
    assert len(digest) == 64
    assert all(ch in "0123456789abcdef" for ch in digest)


def test_equal_lessons_hash_equal():
    assert compute_spec_hash(make_lesson()) == compute_spec_hash(make_lesson())
