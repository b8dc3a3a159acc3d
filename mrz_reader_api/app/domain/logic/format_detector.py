import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from app.domain.models.mrz_data import DocumentType
from app.utils.mrz_utils import FILLER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MRZLayout:
    document_type: DocumentType
    line_count: int
    line_length: int


TD1 = MRZLayout(DocumentType.TD1, 3, 30)
TD2 = MRZLayout(DocumentType.TD2, 2, 36)
TD3 = MRZLayout(DocumentType.TD3, 2, 44)

# Checked in this order: a pair of 44+ lines is a passport before it is a TD2
LAYOUTS = (TD3, TD1, TD2)
FALLBACK_BY_LINE_COUNT = {2: TD3, 3: TD1}


@dataclass(frozen=True)
class FormatDetection:
    layout: Optional[MRZLayout]
    line_lengths: Tuple[int, ...]
    fallback: bool = False

    @property
    def document_type(self) -> DocumentType:
        return self.layout.document_type if self.layout else DocumentType.UNKNOWN

    @property
    def error(self) -> Optional[str]:
        if self.layout is not None:
            return None
        return (
            f"MRZ format error: cannot determine MRZ type from {len(self.line_lengths)} "
            f"line(s) with lengths {list(self.line_lengths)}."
        )


def normalize_lines(text: str) -> List[str]:
    """Split raw OCR text into trimmed lines with inner spaces turned into fillers."""
    return [line.strip().replace(' ', FILLER) for line in text.strip().split('\n')]


def detect_format(lines: List[str]) -> FormatDetection:
    """
    Classify normalized MRZ lines as TD1, TD2 or TD3 from line count and length.
    Two lines default to TD3 and three lines to TD1 when the lengths are too short.
    """
    lengths = tuple(len(line) for line in lines)

    for layout in LAYOUTS:
        if len(lines) == layout.line_count and all(n >= layout.line_length for n in lengths):
            logger.debug("Detected MRZ layout %s", layout.document_type.value)
            return FormatDetection(layout, lengths)

    layout = FALLBACK_BY_LINE_COUNT.get(len(lines))
    if layout is None:
        logger.warning("Unknown MRZ format. Lines: %d, Lengths: %s", len(lines), list(lengths))
        return FormatDetection(None, lengths)

    logger.warning(
        "Ambiguous MRZ line lengths %s, defaulting to %s", list(lengths), layout.document_type.value
    )
    return FormatDetection(layout, lengths, fallback=True)


def pad_lines(lines: List[str], layout: MRZLayout) -> List[str]:
    """Right-pad every line with fillers to the canonical width of the layout."""
    return [line.ljust(layout.line_length, FILLER) for line in lines]
