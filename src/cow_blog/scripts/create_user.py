"""Create a blog author account."""
from __future__ import annotations

import argparse
import getpass
import sys

from cow_blog.core.errors import BlogError
from cow_blog.db.session import session_scope
from cow_blog.services.user_service import create_user


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create a blog author account")
    parser.add_argument("username", help="Login name of the new user")
    parser.add_argument(
        "--password",
        default=None,
        help="Password (prompted for when omitted)",
    )
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    try:
        with session_scope() as db:
            user = create_user(db, args.username, password)
            user_id = user.id
    except BlogError as exc:
        print(f"[create_user] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"[create_user] created user {args.username} (id {user_id})")


if __name__ == "__main__":
    main()
