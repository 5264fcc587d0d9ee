"""Recompute cached comment and post counts."""
from __future__ import annotations

import argparse
import logging

from cow_blog.core.settings import settings
from cow_blog.db.session import session_scope
from cow_blog.services.counts import update_counts


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Bring cached counts in line with the live rows")
    parser.add_argument("--verbose", action="store_true", help="Log every rewritten row")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level.upper())
    with session_scope() as db:
        updates = update_counts(db)
    print(
        f"[update_counts] rewrote {updates.posts} posts, "
        f"{updates.categories} categories, {updates.tags} tags"
    )


if __name__ == "__main__":
    main()
