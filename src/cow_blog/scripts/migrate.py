"""Apply or roll back database migrations."""
from __future__ import annotations

import argparse
from pathlib import Path

from alembic import command
from alembic.config import Config

from cow_blog.core.settings import settings

# Only present in a source checkout; installed wheels do not ship migrations.
MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def alembic_config(url: str | None = None) -> Config:
    cfg = Config(str(MIGRATIONS_DIR / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", url or settings.effective_database_url)
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    return cfg


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Migrate the blog database schema")
    parser.add_argument("revision", nargs="?", default="head", help="Target revision (default: head)")
    parser.add_argument("--downgrade", action="store_true", help="Roll back to the target revision")
    parser.add_argument("--sql", action="store_true", help="Print the SQL instead of running it")
    args = parser.parse_args(argv)

    cfg = alembic_config()
    if args.downgrade:
        command.downgrade(cfg, args.revision, sql=args.sql)
    else:
        command.upgrade(cfg, args.revision, sql=args.sql)


if __name__ == "__main__":
    main()
