from dataclasses import dataclass
from typing import Optional

from app.domain.models.mrz_data import Validity
from app.utils.mrz_utils import FILLER, char_value, is_digit, is_filler_only

# Weights: 7, 3, 1, 7, 3, 1, ... (repeating)
CHECK_DIGIT_WEIGHTS = (7, 3, 1)


@dataclass(frozen=True)
class CheckResult:
    validity: Validity
    error: Optional[str] = None


def compute_check_digit(data: str) -> int:
    """
    Calculate MRZ check digit using ICAO algorithm.
    An empty string yields 0.
    """
    total = 0
    for i, ch in enumerate(data):
        total += char_value(ch) * CHECK_DIGIT_WEIGHTS[i % 3]
    return total % 10


def digit_char(value: int) -> str:
    return str(value % 10)


def validate_check_digit(
    data_field: str,
    expected: Optional[str],
    field_name: str = "Field",
) -> CheckResult:
    """
    Validate a data field against the check digit printed next to it.

      - filler-only field with a filler (or absent) check digit: VALID, nothing to check
      - absent check digit for a field with content: INVALID
      - filler check digit for a field with content: INDETERMINATE
      - otherwise the computed digit has to match
    """
    if is_filler_only(data_field) and (expected is None or expected == FILLER):
        return CheckResult(Validity.VALID)

    if expected is None:
        return CheckResult(
            Validity.INVALID,
            f"{field_name}: Check digit character is missing entirely for non-empty field.",
        )

    if expected == FILLER:
        return CheckResult(
            Validity.INDETERMINATE,
            f"{field_name}: Check digit is '<' (not applicable) for non-empty field "
            f"'{data_field}'. Validation ambiguous.",
        )

    if not is_digit(expected):
        return CheckResult(
            Validity.INVALID,
            f"{field_name}: Expected check digit '{expected}' is not a valid number.",
        )

    expected_value = int(expected)
    calculated = compute_check_digit(data_field)
    if calculated != expected_value:
        return CheckResult(
            Validity.INVALID,
            f"{field_name}: Check digit mismatch. Expected {expected_value}, "
            f"calculated {calculated} (for data '{data_field}')",
        )
    return CheckResult(Validity.VALID)
