#!/usr/bin/env python3
"""Create a user or reset an existing user's password.

Usage:
  python3 scripts/manage_user.py --email programmer@millpoint.com --name "Hans Jensen" --password secret123
  python3 scripts/manage_user.py --email quality@millpoint.com --password secret123 --role quality

Tables are created if missing. DATABASE_URL is read from the environment / .env.
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from millpoint import crud
from millpoint.config.settings import settings
from millpoint.database.connection import Database
from millpoint.models import USER_ROLES


def main():
    parser = argparse.ArgumentParser(description='Create a user or reset a user password')
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default=None, help="Display name (required when creating)")
    parser.add_argument("--role", choices=USER_ROLES, default=None, help="Defaults to programmer for new users")
    args = parser.parse_args()

    database = Database(settings.DATABASE_URL, echo=settings.ECHO_SQL).open()
    try:
        database.create_all()
        with database.session() as db:
            user = crud.get_user_by_email(db, args.email)
            if user:
                print(f"Updating password for existing user: {user.email}")
                crud.update_user_password(db, user, args.password)
                if args.name:
                    user.name = args.name
                if args.role:
                    user.role = args.role
                db.commit()
                print("Password updated")
            else:
                if not args.name:
                    parser.error("--name is required when creating a user")
                role = args.role or "programmer"
                print(f"Creating {role} user: {args.email}")
                crud.create_user(db, args.email, args.name, args.password, role=role)
                print("User created")
    finally:
        database.close()


if __name__ == '__main__':
    main()
