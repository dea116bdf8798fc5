# config.py
import os
from dotenv import load_dotenv
load_dotenv()

import logging
from typing import List

from .logging_utils import configure_logging

configure_logging()
logger = logging.getLogger("transfer.config")

APP_TITLE = "Transfer Booking Flight Check"
APP_VERSION = "1.0.0"

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8001"))


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


# Booking widget is served from several origins; "*" keeps preflights permissive
CORS_ALLOW_ORIGINS: List[str] = _split_csv(os.getenv("CORS_ALLOW_ORIGINS", "*")) or ["*"]

logger.info(
    f"Config: version={APP_VERSION}, cors_origins={CORS_ALLOW_ORIGINS}, port={PORT}"
)
