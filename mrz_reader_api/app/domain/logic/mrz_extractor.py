import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type

from app.domain.logic.format_detector import TD1, TD2, TD3, MRZLayout
from app.domain.models.mrz_data import DocumentType, Sex
from app.utils.mrz_utils import (
    FILLER,
    char_at,
    correct_name_filler,
    is_digit,
    is_filler_only,
    parse_name_field,
    safe_slice,
    strip_filler,
)

logger = logging.getLogger(__name__)

TD1_STRATEGY_ICAO = "icao"
TD1_STRATEGY_TRAILING_DIGIT = "trailing_digit"
TD1_STRATEGIES = (TD1_STRATEGY_ICAO, TD1_STRATEGY_TRAILING_DIGIT)


@dataclass(frozen=True)
class FieldCheck:
    """A data slice, the check digit protecting it and the record flag it feeds."""

    label: str
    data: str
    check_digit: Optional[str]
    flag: Optional[str] = None


@dataclass
class ExtractionResult:
    fields: Dict[str, Any]
    checks: List[FieldCheck] = field(default_factory=list)


def parse_sex(sex_char: Optional[str]) -> Sex:
    if sex_char == 'M':
        return Sex.MALE
    if sex_char == 'F':
        return Sex.FEMALE
    return Sex.UNSPECIFIED


class MRZExtractor:
    """Slices the fields of one MRZ layout out of canonical, padded lines."""

    layout: MRZLayout

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.correct_name_fillers = bool(self.config.get('correct_name_fillers', False))

    def extract(self, lines: List[str]) -> ExtractionResult:
        raise NotImplementedError

    def _parse_names(self, name_field: str) -> Tuple[str, str]:
        if self.correct_name_fillers:
            corrected = correct_name_filler(name_field)
            if corrected != name_field:
                logger.debug("Corrected MRZ name field %s -> %s", name_field, corrected)
            name_field = corrected
        return parse_name_field(name_field)

    @staticmethod
    def _expiry(raw: str) -> Optional[str]:
        return None if is_filler_only(raw) else raw


class TD3Extractor(MRZExtractor):
    """
    Passport, 2 lines of 44.

    Line 1: P<ISSUER<SURNAME<<GIVEN_NAMES<<<<<<<<<<<<<<<
    Line 2: NUMBER(9) CHECK NATIONALITY(3) DOB(6) CHECK SEX EXPIRY(6) CHECK
            PERSONAL_NO(14) CHECK OVERALL_CHECK
    """

    layout = TD3

    def extract(self, lines: List[str]) -> ExtractionResult:
        line1, line2 = lines[0], lines[1]
        surname, given_names = self._parse_names(safe_slice(line1, 5, 44))

        doc_num_raw = safe_slice(line2, 0, 9)
        doc_num_check = char_at(line2, 9)
        dob_raw = safe_slice(line2, 13, 19)
        dob_check = char_at(line2, 19)
        expiry_raw = safe_slice(line2, 21, 27)
        expiry_check = char_at(line2, 27)
        optional_raw = safe_slice(line2, 28, 42)
        optional_check = char_at(line2, 42)
        overall_check = char_at(line2, 43)

        # number + check, dob + check, expiry + check, personal number + check
        composite = safe_slice(line2, 0, 10) + safe_slice(line2, 13, 20) + safe_slice(line2, 21, 43)

        fields = {
            'document_type': DocumentType.TD3,
            'document_code': strip_filler(safe_slice(line1, 0, 2)),
            'issuing_country': strip_filler(safe_slice(line1, 2, 5)),
            'surname': surname,
            'given_names': given_names,
            'document_number': strip_filler(doc_num_raw),
            'document_number_check_digit': doc_num_check,
            'nationality': strip_filler(safe_slice(line2, 10, 13)),
            'date_of_birth': dob_raw,
            'date_of_birth_check_digit': dob_check,
            'sex': parse_sex(char_at(line2, 20)),
            'date_of_expiry': self._expiry(expiry_raw),
            'date_of_expiry_check_digit': expiry_check,
            'optional_data_1': strip_filler(optional_raw),
            'optional_data_1_check_digit': optional_check,
            'overall_check_digit': overall_check,
        }
        checks = [
            FieldCheck("Document Number", doc_num_raw, doc_num_check, 'document_number_valid'),
            FieldCheck("Date of Birth", dob_raw, dob_check, 'date_of_birth_valid'),
            FieldCheck("Date of Expiry", expiry_raw, expiry_check, 'date_of_expiry_valid'),
            FieldCheck("Optional Data 1", optional_raw, optional_check, 'optional_data_valid'),
            FieldCheck("Overall TD3", composite, overall_check, 'overall_valid'),
        ]
        return ExtractionResult(fields, checks)


class TD2Extractor(MRZExtractor):
    """
    ID card, 2 lines of 36.

    Line 1: DOC_CODE(2) ISSUER(3) NAME(31)
    Line 2: NUMBER(9) CHECK NATIONALITY(3) DOB(6) CHECK SEX EXPIRY(6) CHECK
            OPTIONAL(7) OVERALL_CHECK
    """

    layout = TD2

    def extract(self, lines: List[str]) -> ExtractionResult:
        line1, line2 = lines[0], lines[1]
        surname, given_names = self._parse_names(safe_slice(line1, 5, 36))

        doc_num_raw = safe_slice(line2, 0, 9)
        doc_num_check = char_at(line2, 9)
        dob_raw = safe_slice(line2, 13, 19)
        dob_check = char_at(line2, 19)
        expiry_raw = safe_slice(line2, 21, 27)
        expiry_check = char_at(line2, 27)
        # no check digit of its own
        optional_raw = safe_slice(line2, 28, 35)
        overall_check = char_at(line2, 35)

        composite = safe_slice(line2, 0, 10) + safe_slice(line2, 13, 20) + safe_slice(line2, 21, 35)

        fields = {
            'document_type': DocumentType.TD2,
            'document_code': strip_filler(safe_slice(line1, 0, 2)),
            'issuing_country': strip_filler(safe_slice(line1, 2, 5)),
            'surname': surname,
            'given_names': given_names,
            'document_number': strip_filler(doc_num_raw),
            'document_number_check_digit': doc_num_check,
            'nationality': strip_filler(safe_slice(line2, 10, 13)),
            'date_of_birth': dob_raw,
            'date_of_birth_check_digit': dob_check,
            'sex': parse_sex(char_at(line2, 20)),
            'date_of_expiry': self._expiry(expiry_raw),
            'date_of_expiry_check_digit': expiry_check,
            'optional_data_1': strip_filler(optional_raw),
            'overall_check_digit': overall_check,
        }
        checks = [
            FieldCheck("Document Number", doc_num_raw, doc_num_check, 'document_number_valid'),
            FieldCheck("Date of Birth", dob_raw, dob_check, 'date_of_birth_valid'),
            FieldCheck("Date of Expiry", expiry_raw, expiry_check, 'date_of_expiry_valid'),
            FieldCheck("Overall TD2", composite, overall_check, 'overall_valid'),
        ]
        return ExtractionResult(fields, checks)


@dataclass
class TD1DocumentNumber:
    number: str
    check_digit: Optional[str]
    optional_data: str
    checks: List[FieldCheck] = field(default_factory=list)


def _split_trailing_check_digit(segment: str):
    """
    Best-effort split of '<content><digit><<<' into (content, digit).
    Returns (meaningful span, None) when the last non-filler is not a digit,
    and ('', None) when the segment is all fillers.
    """
    meaningful = segment.rstrip(FILLER)
    if not meaningful:
        return '', None
    if is_digit(meaningful[-1]):
        return meaningful[:-1], meaningful[-1]
    return meaningful, None


def split_td1_document_number(line1: str, strategy: str = TD1_STRATEGY_ICAO) -> TD1DocumentNumber:
    """
    Separate the TD1 document number, its check digit and line 1 optional data.

    "icao": number at [5, 14) with its check digit at 14. A filler check digit
    followed by optional data means a long number: the first run of the
    optional data field carries the rest of the number and ends with the
    check digit.

    "trailing_digit": treats [5, 29) as one composite field and takes its
    last non-filler character as the check digit of what precedes it when it
    is a digit. The composite is also validated against position 29 when that
    is a digit. Both are heuristics for the long-number case, not a hard contract.
    """
    if strategy == TD1_STRATEGY_TRAILING_DIGIT:
        composite = safe_slice(line1, 5, 29)
        composite_check = char_at(line1, 29)
        number, check_digit = _split_trailing_check_digit(composite)
        if is_filler_only(number):
            number = ''
        result = TD1DocumentNumber(number, check_digit, composite[len(composite.rstrip(FILLER)):])
        if number or check_digit is not None:
            result.checks.append(
                FieldCheck("Document Number", number, check_digit, 'document_number_valid')
            )
        if is_digit(composite_check):
            result.checks.append(
                FieldCheck("Line 1 Field (DocNum+Opt1)", composite, composite_check, 'optional_data_valid')
            )
        return result

    number = safe_slice(line1, 5, 14)
    check_digit = char_at(line1, 14)
    optional = safe_slice(line1, 15, 30)

    if check_digit == FILLER and not is_filler_only(optional):
        head = optional.split(FILLER, 1)[0]
        extension, embedded_check = _split_trailing_check_digit(head)
        if embedded_check is not None:
            number = number + extension
            check_digit = embedded_check
            optional = optional[len(head):]

    result = TD1DocumentNumber(number, check_digit, optional)
    result.checks.append(FieldCheck("Document Number", number, check_digit, 'document_number_valid'))
    return result


class TD1Extractor(MRZExtractor):
    """
    ID card, 3 lines of 30.

    Line 1: DOC_CODE(2) ISSUER(3) NUMBER(9) CHECK OPTIONAL(15)
    Line 2: DOB(6) CHECK SEX EXPIRY(6) CHECK NATIONALITY(3) OPTIONAL(11) OVERALL_CHECK
    Line 3: NAME(30)
    """

    layout = TD1

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        strategy = self.config.get('td1_document_number_strategy', TD1_STRATEGY_ICAO)
        if strategy not in TD1_STRATEGIES:
            logger.warning("Unknown TD1 document number strategy %r, using %r", strategy, TD1_STRATEGY_ICAO)
            strategy = TD1_STRATEGY_ICAO
        self.document_number_strategy = strategy

    def extract(self, lines: List[str]) -> ExtractionResult:
        line1, line2, line3 = lines[0], lines[1], lines[2]
        document = split_td1_document_number(line1, self.document_number_strategy)
        surname, given_names = self._parse_names(safe_slice(line3, 0, 30))

        dob_raw = safe_slice(line2, 0, 6)
        dob_check = char_at(line2, 6)
        expiry_raw = safe_slice(line2, 8, 14)
        expiry_check = char_at(line2, 14)
        optional2_raw = safe_slice(line2, 18, 29)
        overall_check = char_at(line2, 29)

        # upper line from the number on, dob + check, expiry + check, lower optional data
        composite = (
            safe_slice(line1, 5, 30)
            + safe_slice(line2, 0, 7)
            + safe_slice(line2, 8, 15)
            + safe_slice(line2, 18, 29)
        )

        fields = {
            'document_type': DocumentType.TD1,
            'document_code': strip_filler(safe_slice(line1, 0, 2)),
            'issuing_country': strip_filler(safe_slice(line1, 2, 5)),
            'surname': surname,
            'given_names': given_names,
            'document_number': strip_filler(document.number),
            'document_number_check_digit': document.check_digit,
            'nationality': strip_filler(safe_slice(line2, 15, 18)),
            'date_of_birth': dob_raw,
            'date_of_birth_check_digit': dob_check,
            'sex': parse_sex(char_at(line2, 7)),
            'date_of_expiry': self._expiry(expiry_raw),
            'date_of_expiry_check_digit': expiry_check,
            'optional_data_1': strip_filler(document.optional_data),
            'optional_data_2': strip_filler(optional2_raw),
            'overall_check_digit': overall_check,
        }
        checks = list(document.checks) + [
            FieldCheck("Date of Birth", dob_raw, dob_check, 'date_of_birth_valid'),
            FieldCheck("Date of Expiry", expiry_raw, expiry_check, 'date_of_expiry_valid'),
            FieldCheck("Overall TD1", composite, overall_check, 'overall_valid'),
        ]
        return ExtractionResult(fields, checks)


EXTRACTORS: Dict[DocumentType, Type[MRZExtractor]] = {
    DocumentType.TD1: TD1Extractor,
    DocumentType.TD2: TD2Extractor,
    DocumentType.TD3: TD3Extractor,
}


def get_extractor(document_type: DocumentType, config: Optional[Dict[str, Any]] = None) -> MRZExtractor:
    try:
        extractor_cls = EXTRACTORS[document_type]
    except KeyError:
        raise ValueError(f"Unsupported MRZ type for parsing: {document_type}")
    return extractor_cls(config=config)
