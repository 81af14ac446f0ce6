import pytest

from otp_service.errors import InvalidPhoneNumberError
from otp_service.services.phone import PhoneValidator, mask_phone


@pytest.fixture
def validator() -> PhoneValidator:
    return PhoneValidator()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0501234567", "+994501234567"),
        ("+994501234567", "+994501234567"),
        ("99450 123 45 67", "+994501234567"),
        ("050-123-45-67", "+994501234567"),
        ("(050) 123 45 67", "+994501234567"),
        ("+1 (415) 555-2671", "+14155552671"),
    ],
)
def test_normalize(validator, raw, expected):
    assert validator.normalize(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "+994501234567",
        "0501234567",
        "050 123 45 67",
        "+14155552671",
        "+447911123456",
    ],
)
def test_validate_accepts(validator, raw):
    validator.validate(raw)
    assert validator.is_valid(raw)


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "12345",
        "+12345",
        "+1234567890123456",
        "abcdefghijk",
        "501234567",
        "+99450abc4567",
    ],
)
def test_validate_rejects(validator, raw):
    with pytest.raises(InvalidPhoneNumberError):
        validator.validate(raw)
    assert not validator.is_valid(raw)


def test_accepted_numbers_normalize_to_a_stable_form(validator):
    for raw in ("0501234567", "+994 50 123 45 67", "+994501234567"):
        validator.validate(raw)
        normalized = validator.normalize(raw)
        assert normalized == "+994501234567"
        assert validator.normalize(normalized) == normalized
        validator.validate(normalized)


def test_custom_country_code_and_prefixes():
    validator = PhoneValidator(country_code="+963", mobile_prefixes=("93", "99"))
    assert validator.normalize("0991234567") == "+963991234567"
    validator.validate("0991234567")


def test_mask_phone_keeps_last_digits():
    assert mask_phone("+994501234567") == "***********67"
    assert mask_phone("") == ""
