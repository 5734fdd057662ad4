from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timexa.timexa.container import build_container


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    container = build_container(
        db_config=db_config,
        mail_config=settings.MAIL_CONFIG,
        jwt_config=settings.JWT_CONFIG,
        default_admin=getattr(settings, "DEFAULT_ADMIN", None),
    )
    result = container.auth_service.create_default_admin()
    if not result.ok:
        raise SystemExit(f"Seed failed: {result.message}")

    print(
        f"OK: {result.message} -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
