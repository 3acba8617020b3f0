"""Load demo employees and salary structures (database/seed.sql)."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.payroll_office.payroll_office.database.bootstrap import apply_seed_sql
from src.payroll_office.payroll_office.database.connection import DBConfig


def main() -> None:
    load_dotenv(override=False)
    db_config = dict(importlib.import_module(get_settings_module()).DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    print(f"OK: seeded demo employees and salary structures -> {DBConfig.from_settings(db_config).describe()}")


if __name__ == "__main__":
    main()
