from pydantic import BaseModel, Field
from typing import Optional


class MRZParseRequest(BaseModel):
    text: str = Field(..., description="Newline separated MRZ lines as read by OCR")
    correct_name_fillers: Optional[bool] = Field(
        None, description="Repair '<' misread as 'K' in the name field (defaults to server setting)"
    )


class CheckDigitRequest(BaseModel):
    data: str = Field(..., description="MRZ field content the check digit protects")
