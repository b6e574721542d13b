from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# DB SQLite su file nella root del progetto (accanto a streamlit_app.py)
DB_PATH = Path(__file__).resolve().parents[1] / "medappointments.sqlite"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH}")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Durata di default di uno slot (ore) per il controllo disponibilità
DEFAULT_SLOT_HOURS = float(os.getenv("DEFAULT_SLOT_HOURS", "1"))

_logging_configured = False


def configure_logging() -> None:
    """Configura il root logger una sola volta (API e CLI)."""
    global _logging_configured
    if _logging_configured:
        return

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # SQLAlchemy logga già da solo se DB_ECHO è attivo
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _logging_configured = True
