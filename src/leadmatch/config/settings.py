"""Environment-driven settings for the API and CLI."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

SNAPSHOT_PATH_ENV = "LEADMATCH_SNAPSHOT_PATH"
NATIONAL_THRESHOLD_ENV = "LEADMATCH_NATIONAL_THRESHOLD"
ATTACH_CAP_ENV = "LEADMATCH_ATTACH_CAP"

# Union of full-coverage states an investor needs before it counts as national.
NATIONAL_STATE_THRESHOLD_DEFAULT = 26
ATTACH_CAP_DEFAULT = 3


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def national_state_threshold() -> int:
    return _env_int(NATIONAL_THRESHOLD_ENV, NATIONAL_STATE_THRESHOLD_DEFAULT, min_value=1)


def attach_cap() -> int:
    return _env_int(ATTACH_CAP_ENV, ATTACH_CAP_DEFAULT, min_value=1)


def snapshot_path() -> Optional[Path]:
    raw = os.getenv(SNAPSHOT_PATH_ENV)
    if not raw or not raw.strip():
        return None
    return Path(raw.strip())
