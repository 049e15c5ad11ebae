from __future__ import annotations

import logging

from afy_api.infrastructure.db.engine import Base, get_engine
from afy_api.infrastructure.db.models.users import UserModel
from afy_api.shared.config import get_settings
from afy_api.shared.logging import configure_logging


logger = logging.getLogger(__name__)


def init_db(engine) -> None:
    """Create missing tables. Existing tables are left untouched."""
    Base.metadata.create_all(engine, tables=[UserModel.__table__])
    logger.info("init_db: schema_ready tables=%s", UserModel.__tablename__)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    if not settings.database_url:
        raise SystemExit("DATABASE_URL is required.")
    init_db(get_engine(settings.database_url))


if __name__ == "__main__":
    main()
