"""Tests for input validation helpers."""

import pytest

from pqhelper.core.exceptions import EmptyOrMissingMessage, MalformedKeyRecord
from pqhelper.utils.validators import require_string_field, validate_message


class TestValidateMessage:
    def test_empty_string_is_valid(self) -> None:
        assert validate_message("") == b""

    def test_unicode_encoded_as_utf8(self) -> None:
        assert validate_message("héllo 🔐") == "héllo 🔐".encode("utf-8")

    @pytest.mark.parametrize("message", [None, 42, b"bytes", ["list"]])
    def test_missing_or_non_text_rejected(self, message) -> None:
        with pytest.raises(EmptyOrMissingMessage) as exc_info:
            validate_message(message)
        assert exc_info.value.stage == "input validation"

    def test_lone_surrogate_rejected(self) -> None:
        with pytest.raises(EmptyOrMissingMessage):
            validate_message("\ud800")


class TestRequireStringField:
    def test_returns_value(self) -> None:
        assert require_string_field({"a": "x"}, "a", MalformedKeyRecord) == "x"

    @pytest.mark.parametrize("data", [{}, {"a": None}, {"a": 1}, {"a": ""}])
    def test_rejects(self, data) -> None:
        with pytest.raises(MalformedKeyRecord):
            require_string_field(data, "a", MalformedKeyRecord)

    def test_allow_empty(self) -> None:
        assert require_string_field({"a": ""}, "a", MalformedKeyRecord, allow_empty=True) == ""
