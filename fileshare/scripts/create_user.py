"""
Create a user from the command line. Run from project root:
  python -m fileshare.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m fileshare.scripts.create_user alice alice@example.com your-secure-password admin

Without a role the registration rule applies: the first user becomes admin.
"""
import argparse
import logging
import sys

from fileshare.core.database import SessionLocal
from fileshare.core.security import PASSWORD_MAX_LEN, USERNAME_MAX_LEN, hash_password
from fileshare.models.user import User, UserRole
from fileshare.services.accounts import UserAlreadyExistsError, register_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a fileshare user.")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password (1-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=None,
        choices=[r.value for r in UserRole],
        help="Force a role instead of the first-user-is-admin rule",
    )
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not args.password or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be 1-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1
    if "@" not in args.email:
        print("Invalid email address.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        if args.role is None:
            try:
                user = register_user(db, username, args.email, args.password)
            except UserAlreadyExistsError:
                print(f"User '{username}' or email '{args.email}' already exists.", file=sys.stderr)
                return 1
        else:
            existing = (
                db.query(User)
                .filter((User.username == username) | (User.email == args.email))
                .first()
            )
            if existing:
                print(f"User '{username}' or email '{args.email}' already exists.", file=sys.stderr)
                return 1
            user = User(
                username=username,
                email=args.email,
                password_hash=hash_password(args.password),
                role=UserRole(args.role),
            )
            db.add(user)
            db.commit()
        print(f"Created user '{user.username}' with role '{UserRole(user.role).value}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
