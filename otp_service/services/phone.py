import re
from typing import Iterable

from otp_service.errors import InvalidPhoneNumberError

_SEPARATORS = re.compile(r"[\s\-()]")


class PhoneValidator:
    """Validates and canonicalizes phone numbers for one home country.

    Three shapes are accepted after separators are stripped: a generic
    international number (``+`` and 10-15 digits), a home-country mobile number
    in international form, and a home-country mobile number in national form
    (leading zero). National numbers of exactly ten characters are rewritten
    to the international form before matching.
    """

    def __init__(
        self,
        country_code: str = "994",
        mobile_prefixes: Iterable[str] = ("50", "51", "55", "70", "77", "99"),
    ) -> None:
        self._country_code = country_code.lstrip("+")
        prefixes = "|".join(re.escape(prefix) for prefix in mobile_prefixes)
        self._patterns = (
            re.compile(r"^\+\d{10,15}$"),
            re.compile(rf"^\+{re.escape(self._country_code)}({prefixes})\d{{7}}$"),
            re.compile(rf"^0({prefixes})\d{{7}}$"),
        )

    def validate(self, raw: str) -> None:
        cleaned = self._clean(raw)
        digit_count = len(cleaned.lstrip("+"))
        if digit_count < 10 or digit_count > 15:
            raise InvalidPhoneNumberError(
                "Phone number length must be between 10 and 15 digits"
            )
        if not any(pattern.match(cleaned) for pattern in self._patterns):
            raise InvalidPhoneNumberError()

    def is_valid(self, raw: str) -> bool:
        try:
            self.validate(raw)
        except InvalidPhoneNumberError:
            return False
        return True

    def normalize(self, raw: str) -> str:
        cleaned = self._clean(raw)
        if not cleaned.startswith("+") and cleaned.startswith(self._country_code):
            cleaned = f"+{cleaned}"
        return cleaned

    def _clean(self, raw: str) -> str:
        cleaned = _SEPARATORS.sub("", raw or "")
        if cleaned.startswith("0") and len(cleaned) == 10:
            cleaned = f"+{self._country_code}{cleaned[1:]}"
        return cleaned


def mask_phone(phone: str, visible_digits: int = 2) -> str:
    if not phone:
        return ""
    if len(phone) <= visible_digits:
        return phone
    return "*" * (len(phone) - visible_digits) + phone[-visible_digits:]
