"""Create database tables for the call counter backend."""

from __future__ import annotations

import logging

from callcounter.core.db import engine
from callcounter.models import Base


logger = logging.getLogger("scripts.create_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    main()
