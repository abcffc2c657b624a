from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from dataclasses import dataclass

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

os.environ.setdefault("EXPIRY_SWEEPER_ENABLED", "False")

from spacebook import create_app  # noqa: E402
from spacebook.services import users  # noqa: E402


DEFAULT_PASSWORD = "loadtest123"
USER_PREFIX = "load_student_"


@dataclass
class Options:
    count: int
    prefix: str = USER_PREFIX
    password: str = DEFAULT_PASSWORD


def ensure_users(options: Options) -> None:
    app = create_app()
    created = 0
    skipped = 0
    with app.app_context():
        for idx in range(options.count):
            username = f"{options.prefix}{idx:03d}"
            if users.get_user_by_username(username):
                skipped += 1
                continue
            users.register_student(username, options.password)
            created += 1
    print(f"Requested: {options.count}, created: {created}, skipped (already existed): {skipped}")


def parse_args() -> Options:
    parser = argparse.ArgumentParser(description="Generate load-testing student accounts.")
    parser.add_argument(
        "--count",
        type=int,
        default=120,
        help="Number of student accounts to ensure exist (default: %(default)s).",
    )
    parser.add_argument(
        "--prefix",
        type=str,
        default=USER_PREFIX,
        help="Username prefix to use for generated accounts (default: %(default)s).",
    )
    parser.add_argument(
        "--password",
        type=str,
        default=DEFAULT_PASSWORD,
        help="Password to set for generated accounts (default: %(default)s).",
    )
    args = parser.parse_args()
    return Options(count=args.count, prefix=args.prefix, password=args.password)


def main() -> None:
    ensure_users(parse_args())


if __name__ == "__main__":
    main()
