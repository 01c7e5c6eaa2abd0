from __future__ import annotations

import importlib
import logging
from pathlib import Path

from config import get_settings_module

from crm_system.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("crm_system.scripts.init_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(list_tables(db_config)),
    )


if __name__ == "__main__":
    main()
