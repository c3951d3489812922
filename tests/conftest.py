"""Pytest configuration for path setup.

The package lives under ``src/``.  When pytest is run from a checkout
without installing the project, neither the repository root nor ``src``
is on ``sys.path``.  This file adds both so that ``jwt_clients``,
``scripts`` and ``tests.helpers`` can be imported during collection.
"""

from __future__ import annotations

import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]

for path in (ROOT / "src", ROOT):
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)
