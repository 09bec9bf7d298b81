"""
Tests for the directive parser.

Directive text:
    inputformat=json
    outputformat=yaml
    # comment
    replace.tag.firstName=name
"""

import pytest

from cdim.errors import SettingsError
from cdim.settings import CaseMode, Format, Settings, parse_settings


class TestDefaults:
    """Absent directives fall back to defaults."""

    def test_empty_text(self):
        settings = parse_settings("")
        assert settings.input_format is Format.AUTO
        assert settings.output_format is Format.JSON
        assert settings.align is True
        assert settings.case_mode is CaseMode.NONE
        assert settings.tag_replacements == {}
        assert settings.value_replacements == {}
        assert settings.save_to_history is False

    def test_none_text(self):
        assert parse_settings(None) == Settings()

    def test_comments_and_blank_lines(self):
        settings = parse_settings("# header\n\n   \n  # indented comment\noutputformat=xml\n")
        assert settings.output_format is Format.XML


class TestDirectives:
    """Test each recognized key."""

    def test_formats(self):
        settings = parse_settings("inputformat=emmet\noutputformat=csv")
        assert settings.input_format is Format.EMMET
        assert settings.output_format is Format.CSV

    def test_keys_and_values_case_insensitive(self):
        settings = parse_settings("InputFormat = JSON\nOUTPUTFORMAT=Yaml\nCase=SNAKE\nAlign=No")
        assert settings.input_format is Format.JSON
        assert settings.output_format is Format.YAML
        assert settings.case_mode is CaseMode.SNAKE
        assert settings.align is False

    @pytest.mark.parametrize("text,expected", [
        ("true", True), ("1", True), ("yes", True), ("YES", True),
        ("false", False), ("0", False), ("no", False), ("False", False),
    ])
    def test_boolean_values(self, text, expected):
        assert parse_settings(f"align={text}").align is expected
        assert parse_settings(f"savetohistory={text}").save_to_history is expected

    def test_replacements_keep_find_key_case(self):
        settings = parse_settings("replace.tag.firstName=name\nREPLACE.VAL.Yes=1")
        assert settings.tag_replacements == {"firstName": "name"}
        assert settings.value_replacements == {"Yes": "1"}

    def test_replacement_value_may_contain_equals(self):
        settings = parse_settings("replace.val.a=b=c")
        assert settings.value_replacements == {"a": "b=c"}

    def test_later_directive_wins(self):
        settings = parse_settings("outputformat=xml\noutputformat=yaml")
        assert settings.output_format is Format.YAML

    def test_needs_changes(self):
        assert not parse_settings("align=false").needs_changes
        assert parse_settings("case=upper").needs_changes
        assert parse_settings("replace.val.10=Passed").needs_changes


class TestErrors:
    """Malformed or out-of-enumeration directives raise SettingsError."""

    def test_unknown_key(self):
        with pytest.raises(SettingsError) as exc_info:
            parse_settings("outputformat=json\nbogus=1")
        assert exc_info.value.line_number == 2
        assert exc_info.value.line == "bogus=1"

    def test_line_number_counts_comments(self):
        with pytest.raises(SettingsError) as exc_info:
            parse_settings("# comment\n\ncase=kebab")
        assert exc_info.value.line_number == 3

    def test_missing_equals(self):
        with pytest.raises(SettingsError, match="expected key=value"):
            parse_settings("outputformat")

    def test_auto_is_not_an_output_format(self):
        with pytest.raises(SettingsError, match="output format"):
            parse_settings("outputformat=auto")

    def test_unknown_input_format(self):
        with pytest.raises(SettingsError):
            parse_settings("inputformat=toml")

    def test_bad_boolean(self):
        with pytest.raises(SettingsError, match="boolean"):
            parse_settings("align=maybe")

    def test_bad_case_mode(self):
        with pytest.raises(SettingsError):
            parse_settings("case=kebab")

    def test_empty_replacement_key(self):
        with pytest.raises(SettingsError):
            parse_settings("replace.tag.=x")


class TestToDict:
    """Test the reported form of effective settings."""

    def test_to_dict(self):
        settings = parse_settings("inputformat=csv\noutputformat=xml\nalign=0\nreplace.tag.a=b")
        assert settings.to_dict() == {
            "inputformat": "csv",
            "outputformat": "xml",
            "align": False,
            "case": "none",
            "savetohistory": False,
            "replace": {"tag": {"a": "b"}, "val": {}},
        }
