"""Central settings loader. Reads the project .env once on import."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from replenishment_engine.analyzers.validation import InvalidInputError

# Project root .env; real environment variables take precedence
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _int_setting(environ: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise InvalidInputError(f"{name} must be an integer: {raw!r}") from e
    if value < minimum:
        raise InvalidInputError(f"{name} must be >= {minimum}: {value}")
    return value


@dataclass(frozen=True)
class Settings:
    region_name: str = "us-east-1"
    items_table: str = "Items"
    receipts_table: str = "Receipts"
    issues_table: str = "Issues"
    # Used when a stored item carries no minimum threshold
    default_min_threshold_general: int = 10
    default_min_threshold_ppe: int = 5
    indicator_window_days: int = 30
    abc_window_days: int = 90
    forecast_window_days: int = 90
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            region_name=env.get("AWS_DEFAULT_REGION", cls.region_name),
            items_table=env.get("ITEMS_TABLE", cls.items_table),
            receipts_table=env.get("RECEIPTS_TABLE", cls.receipts_table),
            issues_table=env.get("ISSUES_TABLE", cls.issues_table),
            default_min_threshold_general=_int_setting(
                env, "DEFAULT_MIN_THRESHOLD", cls.default_min_threshold_general, 0
            ),
            default_min_threshold_ppe=_int_setting(
                env, "DEFAULT_PPE_MIN_THRESHOLD", cls.default_min_threshold_ppe, 0
            ),
            indicator_window_days=_int_setting(
                env, "INDICATOR_WINDOW_DAYS", cls.indicator_window_days, 1
            ),
            abc_window_days=_int_setting(env, "ABC_WINDOW_DAYS", cls.abc_window_days, 1),
            forecast_window_days=_int_setting(
                env, "FORECAST_WINDOW_DAYS", cls.forecast_window_days, 1
            ),
            log_level=env.get("LOG_LEVEL", cls.log_level).upper(),
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Basic logging setup for scripts and the MCP server."""
    logging.basicConfig(
        level=level or Settings.from_env().log_level,
        format=LOG_FORMAT,
    )
