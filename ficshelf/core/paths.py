#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants and configuration for The Fic Shelf.

All runtime data (database and logs) lives under a single data root.
By default that is ``ROOT/data``; set the ``FICSHELF_HOME`` environment
variable to relocate it.

The layout:
    DATA_ROOT/
    ├── ficshelf.db    # SQLite database
    └── logs/          # Application logs
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path

# ----- Package & project directories -----
PACKAGE_DIR = Path(__file__).resolve().parent.parent
ROOT = PACKAGE_DIR.parent

# ----- Data root -----
DATA_ROOT = Path(os.environ.get("FICSHELF_HOME", ROOT / "data")).expanduser()

# ----- Database -----
DB_PATH = DATA_ROOT / "ficshelf.db"
MIGRATIONS_DIR = PACKAGE_DIR / "migrations"

# ----- Logs -----
LOG_DIR = DATA_ROOT / "logs"
