"""Example: drive the service layer directly, without Flask.

Controllers are thin; every rule lives in the services and the authorization gate.
"""

import importlib
import json

from config import get_settings_module

from crm_system.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    admin = container.auth_service.authenticate("admin@crm.local", "admin123")
    print(json.dumps(container.analytics_service.dashboard(admin)["overview"], indent=2))


if __name__ == "__main__":
    main()
