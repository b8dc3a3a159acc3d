from dotenv import load_dotenv
from fastapi import Depends

from app.core.config import Settings, settings
from app.services.orchestrator import MRZParseOrchestrator

# Load .env on import
load_dotenv()


def get_settings() -> Settings:
    """Dependency to inject the service settings."""
    return settings


def get_orchestrator(current: Settings = Depends(get_settings)) -> MRZParseOrchestrator:
    """Dependency to inject a parser configured from settings."""
    return MRZParseOrchestrator(config=current.parser_config)
