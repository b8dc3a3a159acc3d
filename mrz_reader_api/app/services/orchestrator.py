import logging
from typing import Any, Dict, List, Optional

from app.domain.logic.checksum import validate_check_digit
from app.domain.logic.format_detector import detect_format, normalize_lines, pad_lines
from app.domain.logic.mrz_extractor import ExtractionResult, get_extractor
from app.domain.models.mrz_data import ParsedRecord, Validity

logger = logging.getLogger(__name__)


class MRZParseOrchestrator:
    """Orchestrates the MRZ parse: format detection, field extraction and check digit validation."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    def parse(self, text: str) -> ParsedRecord:
        """
        Parse a newline separated MRZ text block into a ParsedRecord.

        Never raises for string input: problems are reported through the
        record's parsing_errors and validity flags.

        Args:
            text: Raw OCR output of the machine readable zone

        Returns:
            ParsedRecord with the extracted fields, validity flags and errors
        """
        lines = normalize_lines(text)
        detection = detect_format(lines)

        if detection.layout is None:
            return ParsedRecord(raw_lines=tuple(lines), parsing_errors=(detection.error,))

        logger.debug("Attempting to parse as: %s", detection.document_type.value)
        extractor = get_extractor(detection.document_type, self.config)
        extraction = extractor.extract(pad_lines(lines, detection.layout))

        flags, errors = self._validate(extraction)
        if errors:
            logger.info("MRZ parsed as %s with %d error(s)", detection.document_type.value, len(errors))

        return ParsedRecord(
            **extraction.fields,
            **flags,
            raw_lines=tuple(lines),
            parsing_errors=tuple(errors),
        )

    def _validate(self, extraction: ExtractionResult):
        """Run every check digit of the extraction, in field order."""
        flags: Dict[str, Validity] = {}
        errors: List[str] = []
        for check in extraction.checks:
            result = validate_check_digit(check.data, check.check_digit, check.label)
            if result.error:
                errors.append(result.error)
            if check.flag:
                flags[check.flag] = result.validity
        return flags, errors


def parse_mrz(text: str, config: Optional[Dict[str, Any]] = None) -> ParsedRecord:
    return MRZParseOrchestrator(config=config).parse(text)
