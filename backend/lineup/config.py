"""
Application settings read from the environment (.env supported).
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    return int(raw)


DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./lineup.db")
SQL_ECHO: bool = _env_bool("SQL_ECHO")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS: List[str] = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8081",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    CORS_ORIGINS.extend(o.strip() for o in _extra.split(",") if o.strip())

# League table scoring
WIN_POINTS: int = _env_int("WIN_POINTS", 3)
DRAW_POINTS: int = _env_int("DRAW_POINTS", 1)
LOSS_POINTS: int = _env_int("LOSS_POINTS", 0)

# Fixed seed for every shuffle when set (demo/staging reproducibility); unset = fresh entropy per call
DEFAULT_RNG_SEED: Optional[int] = _env_int("DEFAULT_RNG_SEED", None)
