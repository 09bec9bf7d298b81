"""
Tests for the CSV codec (flatten on encode, unflatten on decode).

    person.name,person.age
    John,30
"""

import pytest

from cdim.codecs.tabular import decode_csv, encode_csv, flatten_record, unflatten_record
from cdim.errors import DecodeError, EncodeError
from cdim.model import Mapping, Scalar, Sequence
from cdim.serialization import value_from_python, value_to_python


class TestFlatten:
    """Test dot-path flattening."""

    def test_nested_mapping(self):
        record = value_from_python({"user": {"name": "Alice", "address": {"city": "Sofia"}}})
        assert flatten_record(record) == {
            "user.name": Scalar("Alice"),
            "user.address.city": Scalar("Sofia"),
        }

    def test_sequence_kept_whole(self):
        record = value_from_python({"tags": ["a", "b"]})
        assert flatten_record(record) == {"tags": Sequence([Scalar("a"), Scalar("b")])}

    def test_unflatten(self):
        record = unflatten_record({"user.name": "Alice", "user.age": "30"})
        assert value_to_python(record) == {"user": {"name": "Alice", "age": 30}}

    def test_unflatten_conflict(self):
        with pytest.raises(DecodeError):
            unflatten_record({"a": "1", "a.b": "2"})
        with pytest.raises(DecodeError):
            unflatten_record({"a.b": "2", "a": "1"})


class TestEncodeCsv:
    """Test canonical tree -> CSV text."""

    def test_single_record(self):
        value = value_from_python({"name": "John", "age": 30})
        assert encode_csv(value) == "name,age\nJohn,30"

    def test_nested_record(self):
        value = value_from_python({"person": {"name": "John", "age": 30}})
        assert encode_csv(value) == "person.name,person.age\nJohn,30"

    def test_column_union_in_first_seen_order(self):
        value = value_from_python([{"a": 1, "b": 2}, {"a": 3, "c": 4}])
        assert encode_csv(value) == "a,b,c\n1,2,\n3,,4"

    def test_comma_is_quoted(self):
        value = value_from_python({"city": "Sofia, BG"})
        assert encode_csv(value) == 'city\n"Sofia, BG"'

    def test_quote_is_doubled(self):
        value = value_from_python({"quote": 'say "hi"'})
        assert encode_csv(value) == 'quote\n"say ""hi"""'

    def test_sequence_value_joined(self):
        value = value_from_python({"id": 1, "tags": ["a", "b"]})
        assert encode_csv(value) == 'id,tags\n1,"a,b"'

    def test_null_and_boolean_cells(self):
        value = value_from_python({"a": None, "b": True, "c": 1})
        assert encode_csv(value) == "a,b,c\n,true,1"

    def test_no_trailing_newline(self):
        assert not encode_csv(value_from_python([{"a": 1}, {"a": 2}])).endswith("\n")

    def test_non_mapping_row_warns(self):
        value = Sequence([Scalar(1), Mapping([("a", Scalar(2))])])
        with pytest.warns(UserWarning, match="Row 1"):
            text = encode_csv(value)
        assert text.splitlines()[0] == "a"
        assert text.splitlines()[-1] == "2"

    @pytest.mark.parametrize("data", [{}, {"a": {}}, []])
    def test_no_columns(self, data):
        """A tree with nothing to put in a header cannot be written."""
        with pytest.raises(EncodeError, match="no columns"):
            encode_csv(value_from_python(data))


class TestDecodeCsv:
    """Test CSV text -> canonical tree."""

    def test_single_row_is_bare_mapping(self):
        value = decode_csv("name,age\nJohn,30")
        assert isinstance(value, Mapping)
        assert value_to_python(value) == {"name": "John", "age": 30}

    def test_many_rows_is_sequence(self):
        value = decode_csv("a,b\n1,2\n3,4")
        assert value_to_python(value) == [{"a": 1, "b": 2}, {"a": 3, "b": 4}]

    def test_header_only_is_empty_sequence(self):
        assert decode_csv("a,b") == Sequence()

    def test_dotted_columns_nest(self):
        value = decode_csv("person.name,person.age\nJohn,30")
        assert value_to_python(value) == {"person": {"name": "John", "age": 30}}

    def test_loose_numeric_coercion(self):
        value = decode_csv("a,b,c,d\n 42 ,+5,1e3,123 Main St")
        assert value_to_python(value) == {"a": 42, "b": 5, "c": 1000.0, "d": "123 Main St"}

    def test_quoted_comma_unescaped(self):
        value = decode_csv('city,zip\n"Sofia, BG",1000')
        assert value_to_python(value) == {"city": "Sofia, BG", "zip": 1000}

    def test_header_whitespace_stripped(self):
        assert value_to_python(decode_csv(" a , b \n1,2")) == {"a": 1, "b": 2}

    def test_blank_lines_skipped(self):
        value = decode_csv("a\n1\n\n2\n")
        assert value_to_python(value) == [{"a": 1}, {"a": 2}]

    def test_missing_cells_read_empty(self):
        assert value_to_python(decode_csv("a,b\n1")) == {"a": 1, "b": ""}

    def test_extra_cells_warn(self):
        with pytest.warns(UserWarning, match="extra cells ignored"):
            value = decode_csv("a\n1,2")
        assert value_to_python(value) == {"a": 1}

    def test_empty_input(self):
        with pytest.raises(DecodeError, match="header row is missing"):
            decode_csv("  \n ")

    def test_blank_column(self):
        with pytest.raises(DecodeError, match="blank column"):
            decode_csv("a,,b\n1,2,3")

    def test_duplicate_columns(self):
        with pytest.raises(DecodeError, match="duplicate"):
            decode_csv("a,a\n1,2")


class TestRoundTrip:
    """Single records survive encode -> decode."""

    @pytest.mark.parametrize("data", [
        {"person": {"name": "John", "age": 30}},
        {"name": "John", "age": 30, "address": {"city": "Sofia"}},
        {"city": "Sofia, BG", "note": 'say "hi"'},
    ])
    def test_round_trip(self, data):
        value = value_from_python(data)
        assert decode_csv(encode_csv(value)) == value
