import os
from dotenv import load_dotenv
from typing import Dict, Any

load_dotenv()

TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in TRUTHY


class Settings:
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    TD1_DOCUMENT_NUMBER_STRATEGY: str = os.getenv("MRZ_TD1_DOCUMENT_NUMBER_STRATEGY", "icao")
    CORRECT_NAME_FILLERS: bool = _env_flag("MRZ_CORRECT_NAME_FILLERS")
    MAX_INPUT_LENGTH: int = int(os.getenv("MRZ_MAX_INPUT_LENGTH", "512"))
    DATE_OUTPUT_FORMAT: str = os.getenv("MRZ_DATE_OUTPUT_FORMAT", "%d/%m/%Y")

    @property
    def parser_config(self) -> Dict[str, Any]:
        return {
            'td1_document_number_strategy': self.TD1_DOCUMENT_NUMBER_STRATEGY,
            'correct_name_fillers': self.CORRECT_NAME_FILLERS,
        }


settings = Settings()
