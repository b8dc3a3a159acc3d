import logging
from datetime import date, datetime
from typing import Optional

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

# Expiry dates lie in the future, so they get a forward window on top of the
# current year before a two-digit year is pushed back to the 1900s.
EXPIRY_WINDOW_YEARS = 20


def adjust_century(two_digit_year: int, reference_year: int, window: int = 0) -> int:
    """
    Adjust a two-digit year to a full year based on a reference year.
    If the two-digit year <= reference year's two-digit (+ window) => 2000+; else 1900+.
    """
    yy = two_digit_year
    cutoff = reference_year % 100 + window
    if yy <= cutoff:
        return 2000 + yy
    return 1900 + yy


def parse_mrz_date(
    raw: Optional[str],
    reference_year: Optional[int] = None,
    expiry: bool = False,
) -> Optional[date]:
    """
    Parse a YYMMDD string from MRZ into a proper date with century correction.
    Returns None for anything that is not six digits or not a calendar date.
    """
    if raw is None or len(raw) != 6 or not all(ch in "0123456789" for ch in raw):
        return None

    if reference_year is None:
        reference_year = datetime.today().year

    yy = int(raw[0:2])
    mm = int(raw[2:4])
    dd = int(raw[4:6])
    window = EXPIRY_WINDOW_YEARS if expiry else 0
    full_year = adjust_century(yy, reference_year, window)
    try:
        return date(full_year, mm, dd)
    except ValueError:
        logger.debug("MRZ date %s is not a calendar date", raw)
        return None


def convert_mrz_date(
    raw: Optional[str],
    output_format: str = "%d/%m/%Y",
    expiry: bool = False,
    reference_year: Optional[int] = None,
) -> str:
    """Convert YYMMDD to readable date format, or 'N/A' when it cannot be converted."""
    if raw is None or not raw.strip():
        return NOT_AVAILABLE
    parsed = parse_mrz_date(raw, reference_year=reference_year, expiry=expiry)
    if parsed is None:
        return NOT_AVAILABLE
    try:
        return parsed.strftime(output_format)
    except ValueError:
        logger.warning("Invalid date output format: %r", output_format)
        return NOT_AVAILABLE
