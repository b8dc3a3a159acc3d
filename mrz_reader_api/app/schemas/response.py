from pydantic import BaseModel
from typing import Dict

from app.domain.models.mrz_data import ParsedRecord


class MRZParseResponse(BaseModel):
    valid: bool
    data: ParsedRecord
    checks: Dict[str, str]


class CheckDigitResponse(BaseModel):
    data: str
    check_digit: int
