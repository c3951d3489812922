#!/usr/bin/env python
"""Simple health check utility.

This script reports whether each setting the service clients need is
present, either directly in the environment or through a ``*_FILE``
path.  Values are never printed.  Operators can run it before starting a
service to confirm the clients will construct.
"""

from __future__ import annotations

import os
from typing import Dict, List


KEYS = [
    "SERVICE_SECRET",
    "SERVICE_TOKEN",
    "SERVICE_SLUG",
    "USER_DATASTORE_URL",
    "SUBMITTER_URL",
]


def check(keys: List[str] = KEYS) -> Dict[str, str]:
    """Return ``{key: "set" | "file" | "missing"}`` for each key."""
    report: Dict[str, str] = {}
    for key in keys:
        if os.environ.get(f"{key}_FILE"):
            report[key] = "file"
        elif os.environ.get(key):
            report[key] = "set"
        else:
            report[key] = "missing"
    return report


def main() -> None:
    print("Health Check:")
    for key, status in check().items():
        print(f"{key}: {status}")


if __name__ == "__main__":
    main()
