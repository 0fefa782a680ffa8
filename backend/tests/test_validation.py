"""Tests for the validation engine."""

from datetime import date

import pytest

from formcraft.schemas.fields import FieldType, FormField
from formcraft.services.validation import (
    ValidationReason,
    ValidationResult,
    is_empty,
    normalize_submission,
    normalize_value,
    parse_checkbox,
    parse_date,
    parse_number,
    rejected_fields,
    validate_submission,
    validate_value,
)


def _field(field_type, **overrides) -> FormField:
    base = {"id": "f1", "type": field_type, "label": "Question"}
    base.update(overrides)
    return FormField(**base)


# ---------------------------------------------------------------------------
# ValidationResult
# ---------------------------------------------------------------------------


class TestValidationResult:
    def test_ok(self):
        result = ValidationResult.ok()
        assert result.accepted is True
        assert result.reason is None

    def test_reject(self):
        result = ValidationResult.reject(ValidationReason.TOO_LONG, "too long")
        assert result.accepted is False
        assert result.reason is ValidationReason.TOO_LONG
        assert result.message == "too long"

    def test_accepted_with_reason_is_invalid(self):
        with pytest.raises(ValueError, match="cannot carry"):
            ValidationResult(True, ValidationReason.BELOW_MIN)

    def test_rejected_without_reason_is_invalid(self):
        with pytest.raises(ValueError, match="needs a reason"):
            ValidationResult(False)

    def test_equality_ignores_message(self):
        assert ValidationResult.reject(ValidationReason.BELOW_MIN, "a") == ValidationResult.reject(
            ValidationReason.BELOW_MIN, "b"
        )
        assert ValidationResult.ok() != ValidationResult.reject(ValidationReason.BELOW_MIN, "a")


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    @pytest.mark.parametrize("value", [None, "", "   ", False])
    def test_empty_values(self, value):
        assert is_empty(value)

    @pytest.mark.parametrize("value", ["x", 0, 0.0, True, "0"])
    def test_non_empty_values(self, value):
        assert not is_empty(value)

    def test_parse_number(self):
        assert parse_number("42") == 42.0
        assert parse_number(" 3.5 ") == 3.5
        assert parse_number(7) == 7.0
        assert parse_number("abc") is None
        assert parse_number(True) is None
        assert parse_number("nan") is None
        assert parse_number("inf") is None
        assert parse_number(10**400) is None
        assert parse_number([1]) is None

    def test_parse_date(self):
        assert parse_date("2026-03-01") == date(2026, 3, 1)
        assert parse_date("2026-02-30") is None
        assert parse_date("03/01/2026") is None
        assert parse_date("2026-3-1") is None
        assert parse_date(20260301) is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            (False, False),
            ("Yes", True),
            ("on", True),
            ("TRUE", True),
            ("No", False),
            ("off", False),
            ("false", False),
            ("maybe", None),
            (1, None),
        ],
    )
    def test_parse_checkbox(self, value, expected):
        assert parse_checkbox(value) is expected


# ---------------------------------------------------------------------------
# validate_value
# ---------------------------------------------------------------------------


class TestRequired:
    @pytest.mark.parametrize("field_type", list(FieldType))
    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_required_empty_is_missing(self, field_type, value):
        field = _field(field_type, required=True, options=["A"])
        result = validate_value(field, value)
        assert result.reason is ValidationReason.MISSING_REQUIRED

    @pytest.mark.parametrize("field_type", list(FieldType))
    def test_optional_empty_is_accepted(self, field_type):
        assert validate_value(_field(field_type, options=["A"]), None).accepted

    def test_required_checkbox_unticked(self):
        field = _field("checkbox", required=True)
        assert validate_value(field, False).reason is ValidationReason.MISSING_REQUIRED
        assert validate_value(field, "No").reason is ValidationReason.MISSING_REQUIRED
        assert validate_value(field, "Yes").accepted

    @pytest.mark.parametrize("field_type", list(FieldType))
    @pytest.mark.parametrize("value", [None, "", "x", 0, -1.5, True, False, [1], {"a": 1}, "2026-01-01"])
    def test_total(self, field_type, value):
        field = _field(field_type, options=["A", "B"], validation={"min": 0, "max": 5, "min_length": 1})
        result = validate_value(field, value)
        assert isinstance(result, ValidationResult)
        assert result.accepted or result.reason is not None


class TestNumber:
    @pytest.fixture
    def field(self):
        return _field("number", validation={"min": 0, "max": 120})

    def test_below_min(self, field):
        assert validate_value(field, -1).reason is ValidationReason.BELOW_MIN

    def test_above_max(self, field):
        assert validate_value(field, 121).reason is ValidationReason.ABOVE_MAX

    def test_within_bounds(self, field):
        assert validate_value(field, 30).accepted
        assert validate_value(field, "30").accepted

    def test_bounds_are_inclusive(self, field):
        assert validate_value(field, 0).accepted
        assert validate_value(field, 120).accepted

    def test_not_a_number(self, field):
        assert validate_value(field, "thirty").reason is ValidationReason.INVALID_FORMAT

    def test_message_formats_integer_bounds(self, field):
        assert validate_value(field, -1).message == "Value must be at least 0"


class TestText:
    def test_length_bounds(self):
        field = _field("text", validation={"min_length": 2, "max_length": 4})
        assert validate_value(field, "a").reason is ValidationReason.TOO_SHORT
        assert validate_value(field, "abcde").reason is ValidationReason.TOO_LONG
        assert validate_value(field, "abc").accepted

    def test_textarea_uses_length_bounds(self):
        field = _field("textarea", validation={"max_length": 3})
        assert validate_value(field, "long answer").reason is ValidationReason.TOO_LONG

    def test_non_string_rejected(self):
        assert validate_value(_field("text"), 5).reason is ValidationReason.INVALID_FORMAT

    def test_stale_numeric_bounds_are_inert(self):
        field = _field("text", validation={"min": 10, "max": 20})
        assert validate_value(field, "hello").accepted


class TestEmail:
    @pytest.mark.parametrize("value", ["a@b.com", "jane.doe@mail.example.org"])
    def test_valid(self, value):
        assert validate_value(_field("email"), value).accepted

    @pytest.mark.parametrize("value", ["not-an-email", "a@b", "a b@c.com", "a@@b.com", "@b.com", "a@.com"])
    def test_invalid(self, value):
        assert validate_value(_field("email"), value).reason is ValidationReason.INVALID_FORMAT


class TestSelect:
    @pytest.fixture
    def field(self):
        return _field("select", options=["A", "B"])

    def test_unknown_option(self, field):
        assert validate_value(field, "C").reason is ValidationReason.INVALID_FORMAT

    def test_known_option(self, field):
        assert validate_value(field, "A").accepted

    def test_options_are_case_sensitive(self, field):
        assert validate_value(field, "a").reason is ValidationReason.INVALID_FORMAT


class TestDateAndCheckbox:
    def test_date(self):
        field = _field("date")
        assert validate_value(field, "2026-03-01").accepted
        assert validate_value(field, "tomorrow").reason is ValidationReason.INVALID_FORMAT

    def test_checkbox(self):
        field = _field("checkbox")
        assert validate_value(field, True).accepted
        assert validate_value(field, "Yes").accepted
        assert validate_value(field, "maybe").reason is ValidationReason.INVALID_FORMAT


class TestUnsupportedType:
    def test_unknown_type_rejected(self):
        field = FormField.model_construct(id="x", type="signature", label="Sign", required=False)
        assert validate_value(field, "scribble").reason is ValidationReason.UNSUPPORTED_TYPE

    def test_unknown_type_required_and_empty(self):
        field = FormField.model_construct(id="x", type="signature", label="Sign", required=True)
        assert validate_value(field, "").reason is ValidationReason.MISSING_REQUIRED


class TestTypeChange:
    def test_options_kept_but_ignored_after_type_change(self):
        field = _field("select", options=["A", "B"]).model_copy(update={"type": FieldType.TEXT})
        assert field.options == ["A", "B"]
        assert validate_value(field, "anything").accepted


# ---------------------------------------------------------------------------
# Whole submissions
# ---------------------------------------------------------------------------


class TestSubmission:
    @pytest.fixture
    def fields(self):
        return [
            _field("email", id="email", label="Email", required=True),
            _field("number", id="age", label="Age", validation={"min": 0, "max": 120}),
            _field("checkbox", id="agree", label="Agree"),
        ]

    def test_one_verdict_per_field_in_order(self, fields):
        verdicts = validate_submission(fields, {"email": "a@b.com"})
        assert list(verdicts) == ["email", "age", "agree"]
        assert all(v.accepted for v in verdicts.values())

    def test_rejected_fields(self, fields):
        verdicts = validate_submission(fields, {"email": "nope", "age": 200})
        rejected = rejected_fields(verdicts)
        assert set(rejected) == {"email", "age"}
        assert rejected["age"].reason is ValidationReason.ABOVE_MAX

    def test_none_data(self, fields):
        verdicts = validate_submission(fields, None)
        assert verdicts["email"].reason is ValidationReason.MISSING_REQUIRED

    def test_normalize_submission(self, fields):
        data = {"email": "a@b.com", "age": 30, "agree": "Yes", "extra": "dropped"}
        assert normalize_submission(fields, data) == {"email": "a@b.com", "age": "30", "agree": True}

    def test_normalize_omits_blank_answers(self, fields):
        assert normalize_submission(fields, {"email": "a@b.com", "age": "  "}) == {"email": "a@b.com"}

    def test_normalize_unticked_checkbox_is_false(self, fields):
        assert normalize_value(fields[2], "No") is False
        assert normalize_submission(fields, {"email": "a@b.com", "agree": "off"})["agree"] is False
