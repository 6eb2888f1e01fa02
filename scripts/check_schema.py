#!/usr/bin/env python3
"""Print the columns of a table as seen through the SQL executor.

Usage:
    python scripts/check_schema.py [table]   (default: super_admins)
"""

from __future__ import annotations

import os
import sys

from gym_admin.config import load_config
from gym_admin.flux import select_executor
from gym_admin.guardrails import sanitize_identifier
from gym_admin.logging_utils import configure_logging


def main() -> int:
    table = sanitize_identifier(sys.argv[1] if len(sys.argv) > 1 else "super_admins", "table")
    config = load_config(os.environ.get("GYM_ADMIN_CONFIG", "config.example.yml"))
    configure_logging(config.observability.log_level)
    executor = select_executor(config)

    result = executor.execute(f"SELECT * FROM {table} LIMIT 1")
    if result.error:
        sys.stderr.write(f"Error: {result.error}\n")
        return 1
    print("Columns found:", list(result.rows[0].keys()) if result.rows else [])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
