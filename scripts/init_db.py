from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.salon_billing.salon_billing.database.bootstrap import ensure_indexes
from src.salon_billing.salon_billing.database.connection import DBConfig, MongoConnection


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    mongo_config = dict(settings.MONGO_CONFIG)

    conn = MongoConnection.get_instance(DBConfig(uri=mongo_config["uri"], database=mongo_config["database"]))
    try:
        created = ensure_indexes(conn.db)
    finally:
        conn.close()
    print(f"OK: ensured {created} indexes -> {mongo_config['database']}")


if __name__ == "__main__":
    main()
