from enum import Enum
from datetime import date
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.mrz_dates import convert_mrz_date, parse_mrz_date


class DocumentType(str, Enum):
    TD1 = "TD1"  # ID card, 3 lines of 30
    TD2 = "TD2"  # ID card, 2 lines of 36
    TD3 = "TD3"  # passport, 2 lines of 44
    UNKNOWN = "UNKNOWN"


class Sex(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    UNSPECIFIED = "UNSPECIFIED"


class Validity(str, Enum):
    """Outcome of a single check digit validation."""

    VALID = "valid"
    INVALID = "invalid"
    # check digit is a filler while the field has content: not applicable
    INDETERMINATE = "indeterminate"

    def as_bool(self) -> Optional[bool]:
        if self is Validity.VALID:
            return True
        if self is Validity.INVALID:
            return False
        return None


VALIDITY_FLAGS = (
    "document_number_valid",
    "date_of_birth_valid",
    "date_of_expiry_valid",
    "optional_data_valid",
    "overall_valid",
)


class ParsedRecord(BaseModel):
    """Structured, checksum-validated content of one Machine Readable Zone."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "document_type": "TD3",
                "document_code": "P",
                "issuing_country": "UTO",
                "surname": "ERIKSSON",
                "given_names": "ANNA MARIA",
                "document_number": "L898902C",
                "document_number_check_digit": "3",
                "nationality": "UTO",
                "date_of_birth": "690806",
                "date_of_birth_check_digit": "1",
                "sex": "FEMALE",
                "date_of_expiry": "940623",
                "date_of_expiry_check_digit": "6",
                "optional_data_1": "ZE184226B",
                "optional_data_1_check_digit": "1",
                "optional_data_2": "",
                "overall_check_digit": "4",
                "raw_lines": [
                    "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<",
                    "L898902C<3UTO6908061F9406236ZE184226B<<<<<14",
                ],
                "parsing_errors": [],
                "document_number_valid": "valid",
                "date_of_birth_valid": "valid",
                "date_of_expiry_valid": "valid",
                "optional_data_valid": "valid",
                "overall_valid": "valid",
            }
        },
    )

    document_type: DocumentType = Field(DocumentType.UNKNOWN, description="Detected MRZ layout")
    document_code: str = Field("", description="Document code, e.g. 'P' or 'ID'")
    issuing_country: str = Field("", description="Issuing state (3 letters)")
    surname: str = Field("", description="Primary identifier")
    given_names: str = Field("", description="Secondary identifier")
    document_number: str = Field("", description="Document number")
    document_number_check_digit: Optional[str] = None
    nationality: str = Field("", description="Nationality (3 letters)")
    date_of_birth: str = Field("", description="Date of birth (YYMMDD, as printed)")
    date_of_birth_check_digit: Optional[str] = None
    sex: Sex = Sex.UNSPECIFIED
    date_of_expiry: Optional[str] = Field(None, description="Date of expiry (YYMMDD, as printed)")
    date_of_expiry_check_digit: Optional[str] = None
    optional_data_1: str = Field("", description="Personal number or other optional data")
    optional_data_1_check_digit: Optional[str] = None
    optional_data_2: str = Field("", description="TD1 line 2 optional data")
    overall_check_digit: Optional[str] = None
    raw_lines: Tuple[str, ...] = Field(default_factory=tuple, description="Normalized input lines")
    parsing_errors: Tuple[str, ...] = Field(default_factory=tuple)

    document_number_valid: Optional[Validity] = None
    date_of_birth_valid: Optional[Validity] = None
    date_of_expiry_valid: Optional[Validity] = None
    optional_data_valid: Optional[Validity] = None
    overall_valid: Optional[Validity] = None

    @field_validator(
        'document_number_check_digit',
        'date_of_birth_check_digit',
        'date_of_expiry_check_digit',
        'optional_data_1_check_digit',
        'overall_check_digit',
    )
    @classmethod
    def validate_check_digit_char(cls, v):
        if v is not None and len(v) != 1:
            raise ValueError('Check digits must be a single character')
        return v

    @property
    def valid(self) -> bool:
        """Recognised layout, no failed check digit and a passing composite."""
        if self.document_type is DocumentType.UNKNOWN:
            return False
        if any(getattr(self, flag) is Validity.INVALID for flag in VALIDITY_FLAGS):
            return False
        return self.overall_valid is Validity.VALID

    def checks(self) -> Dict[str, str]:
        """Validity flags keyed by field, 'not_evaluated' where no check ran."""
        summary = {}
        for flag in VALIDITY_FLAGS:
            value = getattr(self, flag)
            summary[flag[:-len('_valid')]] = value.value if value is not None else "not_evaluated"
        return summary

    def birth_date(self, reference_year: Optional[int] = None) -> Optional[date]:
        return parse_mrz_date(self.date_of_birth, reference_year=reference_year)

    def expiry_date(self, reference_year: Optional[int] = None) -> Optional[date]:
        return parse_mrz_date(self.date_of_expiry, reference_year=reference_year, expiry=True)

    def to_readable_format(self, date_format: str = "%d/%m/%Y") -> Dict[str, str]:
        """Convert MRZ data to human-readable format."""
        return {
            'Document Type': {
                DocumentType.TD1: 'ID Card (TD1)',
                DocumentType.TD2: 'ID Card (TD2)',
                DocumentType.TD3: 'Passport (TD3)',
                DocumentType.UNKNOWN: 'Unknown',
            }[self.document_type],
            'Document Code': self.document_code,
            'Issuing Country': self.issuing_country,
            'Surname': self.surname,
            'Given Names': self.given_names,
            'Document Number': self.document_number,
            'Nationality': self.nationality,
            'Date of Birth': convert_mrz_date(self.date_of_birth, date_format),
            'Sex': {Sex.MALE: 'Male', Sex.FEMALE: 'Female', Sex.UNSPECIFIED: 'Unspecified'}[self.sex],
            'Date of Expiry': convert_mrz_date(self.date_of_expiry, date_format, expiry=True),
            'Optional Data': self.optional_data_1 or 'Not specified',
            'Check Digits Valid': 'Yes' if self.valid else 'No',
        }
