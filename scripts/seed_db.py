from __future__ import annotations

import importlib
import logging
from pathlib import Path

from config import get_settings_module

from crm_system.database.bootstrap import DEMO_USERS, apply_seed_sql, ensure_demo_users

logger = logging.getLogger("crm_system.scripts.seed_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    seed_path = Path(__file__).resolve().parents[1] / "database" / "seed.sql"
    apply_seed_sql(db_config, seed_path=seed_path)
    ensure_demo_users(db_config)

    logger.info("Seeded %s with %d demo accounts:", db_config.get("database"), len(DEMO_USERS))
    for _, email, password, role, _ in DEMO_USERS:
        logger.info("  %-22s %-10s %s", email, role, password)


if __name__ == "__main__":
    main()
