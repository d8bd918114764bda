"""
Create a user (e.g. first admin). Run from project root:
  python -m certportal.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m certportal.scripts.create_user admin your-secure-password admin
"""
import argparse
import sys

from certportal.core.database import SessionLocal
from certportal.core.errors import AppError
from certportal.schemas.auth import ROLES
from certportal.services.auth import register


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Certificate Portal user.")
    parser.add_argument("username", help="Username (1-255 chars, case-sensitive)")
    parser.add_argument("password", help="Password (at least 6 chars, at most 72 bytes)")
    parser.add_argument("role", nargs="?", default="participant", choices=list(ROLES))
    args = parser.parse_args(argv)

    username = args.username.strip()
    db = SessionLocal()
    try:
        created = register(db, username, args.password, args.role)
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{created.username}' with role '{created.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
