"""
Tests for the canonical value model.

The tree is a closed sum type: Scalar, Mapping, Sequence.
Mappings never hold duplicate keys; collisions fold into a Sequence.
"""

import pytest

from cdim.model import (
    Mapping,
    Scalar,
    Sequence,
    clone,
    coerce_number,
    is_empty_mapping,
    merge_entry,
    scalar_text,
)


class TestScalar:
    """Test leaf values."""

    def test_string_scalar(self):
        s = Scalar("John")
        assert s.value == "John"
        assert s.text == "John"

    def test_equality_is_kind_aware(self):
        """A boolean is not equal to the number it happens to compare equal to."""
        assert Scalar(True) != Scalar(1)
        assert Scalar(False) != Scalar(0)
        assert Scalar(1) == Scalar(1.0)
        assert Scalar("1") != Scalar(1)
        assert Scalar(None) == Scalar(None)

    def test_hash_matches_equality(self):
        assert hash(Scalar(1)) == hash(Scalar(1.0))
        assert len({Scalar(True), Scalar(1)}) == 2

    def test_immutable(self):
        s = Scalar(5)
        with pytest.raises(AttributeError):
            s.value = 6


class TestMapping:
    """Test keyed entries."""

    def test_duplicate_keys_rejected(self):
        with pytest.raises(ValueError, match="Duplicate key"):
            Mapping([("a", Scalar(1)), ("a", Scalar(2))])

    def test_equality_ignores_order(self):
        m1 = Mapping([("a", Scalar(1)), ("b", Scalar(2))])
        m2 = Mapping([("b", Scalar(2)), ("a", Scalar(1))])
        assert m1 == m2

    def test_equality_compares_values(self):
        assert Mapping([("a", Scalar(1))]) != Mapping([("a", Scalar(2))])
        assert Mapping([("a", Scalar(1))]) != Mapping([("b", Scalar(1))])

    def test_lookup_helpers(self):
        m = Mapping([("name", Scalar("John")), ("age", Scalar(30))])
        assert "name" in m
        assert "city" not in m
        assert m.get("age") == Scalar(30)
        assert m.get("city") is None
        assert m.keys() == ["name", "age"]
        assert list(m) == ["name", "age"]
        assert len(m) == 2

    def test_set_replaces_in_place(self):
        m = Mapping([("a", Scalar(1)), ("b", Scalar(2))])
        m.set("a", Scalar(9))
        assert m.keys() == ["a", "b"]
        assert m.get("a") == Scalar(9)

    def test_set_appends_new_key(self):
        m = Mapping([("a", Scalar(1))])
        m.set("b", Scalar(2))
        assert m.keys() == ["a", "b"]


class TestMergeEntry:
    """Test the duplicate-to-Sequence rule."""

    def test_new_key_appended(self):
        m = Mapping()
        merge_entry(m, "a", Scalar(1))
        assert m == Mapping([("a", Scalar(1))])

    def test_collision_becomes_sequence(self):
        """{user:{name:Alice}} merged with {user:{name:Bob}} -> user: [..., ...]"""
        m = Mapping([("user", Mapping([("name", Scalar("Alice"))]))])
        m.merge("user", Mapping([("name", Scalar("Bob"))]))

        user = m.get("user")
        assert isinstance(user, Sequence)
        assert user.items == [
            Mapping([("name", Scalar("Alice"))]),
            Mapping([("name", Scalar("Bob"))]),
        ]

    def test_third_value_appends(self):
        """An existing Sequence is extended rather than nested."""
        m = Mapping()
        for n in (1, 2, 3):
            merge_entry(m, "li", Scalar(n))
        assert m.get("li") == Sequence([Scalar(1), Scalar(2), Scalar(3)])


class TestScalarText:
    """Test the shared text form of scalars."""

    def test_primitives(self):
        assert scalar_text(True) == "true"
        assert scalar_text(False) == "false"
        assert scalar_text(None) == "null"
        assert scalar_text("x") == "x"

    def test_numbers(self):
        assert scalar_text(30) == "30"
        assert scalar_text(30.0) == "30"
        assert scalar_text(59.99) == "59.99"


class TestCoerceNumber:
    """Test numeric coercion of leaf text."""

    def test_strict_canonical_decimals(self):
        assert coerce_number("42") == 42
        assert coerce_number("-1.5") == -1.5
        assert coerce_number("0") == 0

    def test_strict_keeps_non_canonical_text(self):
        """Leading zeros, trailing zeros and exponents stay strings."""
        assert coerce_number("01") == "01"
        assert coerce_number("1.50") == "1.50"
        assert coerce_number("1e3") == "1e3"
        assert coerce_number(" 42") == " 42"
        assert coerce_number("abc") == "abc"
        assert coerce_number("") == ""

    def test_loose_accepts_trimmed_literals(self):
        assert coerce_number(" 42 ", strict=False) == 42
        assert coerce_number("+5", strict=False) == 5
        assert coerce_number("1e3", strict=False) == 1000.0
        assert coerce_number(".5", strict=False) == 0.5

    def test_loose_keeps_text(self):
        assert coerce_number("123 Main St", strict=False) == "123 Main St"
        assert coerce_number("", strict=False) == ""

    def test_int_vs_float(self):
        assert isinstance(coerce_number("7"), int)
        assert isinstance(coerce_number("7.5"), float)


class TestHelpers:
    """Test clone and empty checks."""

    def test_clone_is_independent(self):
        original = Mapping([("a", Mapping([("b", Scalar(1))]))])
        copied = clone(original)
        copied.get("a").set("b", Scalar(2))
        assert original.get("a").get("b") == Scalar(1)

    def test_is_empty_mapping(self):
        assert is_empty_mapping(Mapping())
        assert not is_empty_mapping(Mapping([("a", Scalar(1))]))
        assert not is_empty_mapping(Sequence())
        assert not is_empty_mapping(Scalar(""))
