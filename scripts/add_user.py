#!/usr/bin/env python3
"""
Add a new user straight to the JSON users file.

Usage:
  python scripts/add_user.py --name Ana --age 30 --email ana@example.com [--file users.json]
"""
from __future__ import annotations

import argparse
import sys

from users_api.core.config import get_settings
from users_api.core.logging import configure_logging
from users_api.repositories.json_storage import JsonUserStorage
from users_api.services.user_service import UserService


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Add a user to the JSON users file")
    ap.add_argument("--name", required=True, help="User name")
    ap.add_argument("--age", required=True, help="User age (stored as an integer when numeric)")
    ap.add_argument("--email", required=True, help="User e-mail")
    ap.add_argument("--file", default=str(settings.users_file), help="Users JSON file (default: USERS_FILE)")
    args = ap.parse_args(argv)

    configure_logging(settings.log_level)
    age = args.age.strip()
    service = UserService(JsonUserStorage(args.file), strict_reads=settings.strict_reads)
    user = service.create_user(
        {
            "name": args.name.strip(),
            "age": int(age) if age.isdigit() else age,
            "email": args.email.strip(),
        }
    )
    print("OK: user created")
    print(f"  ID: {user['id']}")
    print(f"  File: {args.file}")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
