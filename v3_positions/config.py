"""
Configuration settings

Loads environment variables (.env supported) and provides library defaults.
"""
import logging
import os
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Library settings"""

    # Composition defaults
    ACTIVE_ONLY: bool = os.getenv("V3_ACTIVE_ONLY", "true").lower() == "true"
    POSITION_BATCH_SIZE: int = int(os.getenv("V3_POSITION_BATCH_SIZE", 1000))

    # Owners dropped from pending-fee reports (NonfungiblePositionManager by default)
    EXCLUDED_OWNERS: List[str] = _split(
        os.getenv("V3_EXCLUDED_OWNERS", "0x00c7f3082833e796A5b3e4Bd59f6642FF44DCD15")
    )

    # Logging
    LOG_LEVEL: str = os.getenv("V3_LOG_LEVEL", "WARNING").upper()


# Create global settings instance
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts embedding the library"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
