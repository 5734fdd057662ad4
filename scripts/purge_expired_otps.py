"""Delete OTP records past their expiry.

MySQL has no TTL index, so run this from cron (issuance also purges on the fly).
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timexa.timexa.container import build_container

logger = logging.getLogger("purge_expired_otps")


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=settings.DB_CONFIG,
        mail_config=settings.MAIL_CONFIG,
        jwt_config=settings.JWT_CONFIG,
    )
    removed = container.verification_service.purge_expired()
    logger.info("Removed %s expired verification record(s)", removed)


if __name__ == "__main__":
    main()
