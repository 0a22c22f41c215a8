from pathlib import Path
import logging
import sys

from sqlalchemy import text

from db import get_engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def reset_db():
    """
    Drop the app tables.
    DESTRUCTIVE. Intended for dev/test only.
    """
    engine = get_engine()
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE IF EXISTS transactions"))
        conn.execute(text("DROP TABLE IF EXISTS contracts"))
    logger.info("database reset complete")


def run_migrations(engine=None):
    engine = engine or get_engine()
    sql_files = sorted(MIGRATIONS_DIR.glob("*.sql"))

    if not sql_files:
        logger.warning("no migrations found in %s", MIGRATIONS_DIR)
        return

    with engine.begin() as conn:
        for p in sql_files:
            sql = p.read_text(encoding="utf-8").strip()
            if not sql:
                continue
            conn.execute(text(sql))
            logger.info("applied %s", p.name)


def main():
    """
    Usage:
      python migrate.py        # run migrations
      python migrate.py reset  # drop app tables, then exit
    """
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) > 1 and sys.argv[1] == "reset":
        reset_db()
        return

    run_migrations()


if __name__ == "__main__":
    main()
