#!/usr/bin/env python3
"""
paths.py
-------------------
Default path constants for the dream diary.

    ROOT/
    ├── dreamdiary/    # Package code
    ├── data/          # SQLite database
    └── logs/          # Application logs

Each default can be overridden with environment variables, a YAML config
file (see config.py) or CLI options.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Uses DREAMDIARY_HOME when set, otherwise the directory containing the
    package (paths.py -> core/ -> dreamdiary/ -> ROOT/).
    """
    home = os.environ.get("DREAMDIARY_HOME")
    if home:
        return Path(home).expanduser().resolve()
    return Path(__file__).resolve().parent.parent.parent


# ----- Project directory -----
ROOT: Path = _get_project_root()
DATA_DIR = ROOT / "data"

# --- Database ---
DB_PATH = DATA_DIR / "dreamdiary.db"

# ---- Logs & Config ----
LOG_DIR = ROOT / "logs"
CONFIG_PATH = ROOT / "dreamdiary.yaml"
