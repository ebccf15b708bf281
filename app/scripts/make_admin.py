"""
Promote an existing account to administrator. Run from project root:
  python -m app.scripts.make_admin USERNAME [--super]
Example (bootstrap the first super admin, who can then grant roles through the API):
  python -m app.scripts.make_admin alice --super
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.models import User
from app.services.auth import normalize_username


def promote(db, username: str, make_super: bool) -> User | None:
    """Set is_admin (and is_super_admin with make_super); None when the account is missing."""
    user = db.query(User).filter(User.username == normalize_username(username)).first()
    if user is None:
        return None
    user.is_admin = True
    if make_super:
        user.is_super_admin = True
    db.commit()
    return user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Promote an account to admin or super admin.")
    parser.add_argument("username", help="Existing account username")
    parser.add_argument(
        "--super",
        dest="make_super",
        action="store_true",
        help="Also set the super admin flag (full access without a permission grant)",
    )
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        user = promote(db, args.username, args.make_super)
        if user is None:
            print(f"User '{args.username}' not found.", file=sys.stderr)
            return 1
        level = "super admin" if args.make_super else "admin"
        print(f"User '{user.username}' is now {level}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
