import pytest

from littlevec.keys import merge_key, prefixed_keys


def test_two_parts_joined_by_colon():
    assert merge_key("db", "name") == "db:name"


def test_none_gives_trailing_separator():
    assert merge_key("vec", 3, None) == "vec:3:"


def test_no_arguments_gives_empty_string():
    assert merge_key() == ""


def test_single_integer():
    assert merge_key(42) == "42"


def test_negative_integer_keeps_sign():
    assert merge_key("x", -5) == "x:-5"


def test_bytes_are_decoded():
    assert merge_key(b"pld", 1, "id") == "pld:1:id"


def test_unsupported_type_raises():
    with pytest.raises(TypeError):
        merge_key("vec", 1.5)


def test_prefixed_keys_yields_each_id():
    assert list(prefixed_keys("vec", 7, ["a", "b"])) == ["vec:7:a", "vec:7:b"]


def test_prefixed_keys_empty_ids():
    assert list(prefixed_keys("vec", 7, [])) == []


def test_prefixed_keys_is_lazy_and_consistent_with_merge_key():
    ids = ["x", "y", "z"]
    gen = prefixed_keys("pld", 2, iter(ids))
    assert next(gen) == merge_key("pld", 2, "x")
    assert list(gen) == [merge_key("pld", 2, i) for i in ids[1:]]