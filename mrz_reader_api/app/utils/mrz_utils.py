import logging
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

FILLER = '<'
NAME_SEPARATOR = FILLER * 2
DIGITS = '0123456789'
LETTERS = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'


def char_value(ch: str) -> int:
    """
    Numeric value of an MRZ character for check digit arithmetic.
    '0'..'9' -> 0..9, 'A'..'Z' -> 10..35, '<' -> 0.
    Anything else counts as 0 and is logged, never raised.
    """
    if len(ch) == 1 and ch in DIGITS:
        return ord(ch) - ord('0')
    if len(ch) == 1 and ch in LETTERS:
        return ord(ch) - ord('A') + 10
    if ch == FILLER:
        return 0
    logger.warning("Invalid character in MRZ for check digit calculation: %r", ch)
    return 0


def safe_slice(s: str, start: int, end: int) -> str:
    """Substring [start, end) or '' when the bounds do not fit the string."""
    if start < 0 or end > len(s) or start > end:
        return ''
    return s[start:end]


def char_at(s: str, index: int) -> Optional[str]:
    if 0 <= index < len(s):
        return s[index]
    return None


def is_filler_only(s: str) -> bool:
    # '' counts as filler-only
    return all(ch == FILLER for ch in s)


def strip_filler(s: str) -> str:
    return s.strip(FILLER)


def is_digit(ch: Optional[str]) -> bool:
    return ch is not None and len(ch) == 1 and ch in DIGITS


def filler_to_space(s: str) -> str:
    """Replace fillers by spaces and collapse the result to single-spaced words."""
    return ' '.join(s.replace(FILLER, ' ').split())


def parse_name_field(name_field: str) -> Tuple[str, str]:
    """
    Split an MRZ name field into (surname, given_names) on the first '<<'.
    """
    parts = name_field.split(NAME_SEPARATOR, 1)
    surname = filler_to_space(parts[0])
    given_names = filler_to_space(parts[1]) if len(parts) > 1 else ''
    return surname, given_names


def _is_letter(ch: str) -> bool:
    return len(ch) == 1 and ch in LETTERS


def _k_is_filler(chars: List[str], pos: int) -> bool:
    # 'KARL' after a separator keeps its K, 'ERIK<<' keeps its K
    left = chars[pos - 1] if pos > 0 else None
    right = chars[pos + 1] if pos + 1 < len(chars) else FILLER
    return left == FILLER and right in (FILLER, 'K')


def correct_name_filler(name_field: str) -> str:
    """
    Fix likely OCR mistakes in an MRZ name field where '<' was read as 'K'.

    The field keeps its length:
      - characters that are neither A-Z nor '<' become fillers
      - if at least a quarter of the field is fillers, a trailing run made of
        'K' and '<' only is treated as padding (Ks glued to the last word stay)
      - a 'K' preceded by a filler and followed by a filler, another 'K' or the
        end of the field becomes a filler
    A 'K' right after the '<<' name separator is a one-letter given name and
    always stays.
    """
    chars = [ch if _is_letter(ch) else FILLER for ch in name_field]
    size = len(chars)

    separator = ''.join(chars).find(NAME_SEPARATOR)
    lone_k = separator + len(NAME_SEPARATOR) if separator >= 0 else -1
    if not (0 <= lone_k < size and chars[lone_k] == 'K'):
        lone_k = -1

    filler_count = sum(1 for ch in chars if ch == FILLER)
    if filler_count / max(1, size) >= 0.25:
        idx = size
        while idx > 0 and chars[idx - 1] in (FILLER, 'K'):
            idx -= 1
        while idx < size and chars[idx] == 'K':
            idx += 1
        for pos in range(idx, size):
            chars[pos] = FILLER

    for pos in range(size):
        if chars[pos] == 'K' and _k_is_filler(chars, pos):
            chars[pos] = FILLER

    if lone_k >= 0:
        chars[lone_k] = 'K'

    return ''.join(chars)
