#!/usr/bin/env python3
"""
Training portal -- account administration from the shell.

There is no public way to obtain the first admin: self-registration always
creates employees. Use this tool to seed one, then manage everyone else
through the API.

Usage:
  python main.py create-user "Ann Admin" ann@example.com 's3cret-pass' --role admin
  python main.py list-users
  python main.py set-password ann@example.com 'n3w-pass'

Environment variables:
  SECRET_KEY     Required unless DEBUG=true (same rules as the API server).
  DATABASE_URL   SQLAlchemy URL of the credential store.
  BCRYPT_ROUNDS  bcrypt cost factor.
"""

import argparse
import sys

from auth.errors import AuthError
from auth.roles import ASSIGNABLE_ROLES
from auth.service import AuthService
from auth.store import UserStore
from core.config import get_settings


def _build_service() -> tuple[AuthService, UserStore]:
    settings = get_settings()
    store = UserStore(settings.database_url)
    return AuthService.from_settings(store, settings), store


def _create_user(service: AuthService, args: argparse.Namespace) -> int:
    user = service.register(args.name.strip(), args.email.strip(), args.password, args.role)
    print(f"Created user '{user.email}' ({user.id}) with role '{user.role.value}'.")
    return 0


def _list_users(service: AuthService, args: argparse.Namespace) -> int:
    users = service.list_users()
    if not users:
        print("No users.")
        return 0
    for u in users:
        print(f"{u.id}  {u.role.value:<9} {u.email:<40} {u.name}")
    return 0


def _set_password(service: AuthService, args: argparse.Namespace) -> int:
    user = service.get_user_by_email(args.email.strip())
    service.update_password(user.id, args.password)
    print(f"Password updated for '{user.email}'.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Training portal account administration.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="Create a user with any assignable role")
    create.add_argument("name")
    create.add_argument("email")
    create.add_argument("password")
    create.add_argument(
        "--role",
        default="employee",
        choices=sorted(r.value for r in ASSIGNABLE_ROLES),
    )
    create.set_defaults(func=_create_user)

    listing = sub.add_parser("list-users", help="List all users (no password hashes)")
    listing.set_defaults(func=_list_users)

    passwd = sub.add_parser("set-password", help="Reset a user's password by email")
    passwd.add_argument("email")
    passwd.add_argument("password")
    passwd.set_defaults(func=_set_password)

    args = parser.parse_args(argv)

    service, store = _build_service()
    try:
        return args.func(service, args)
    except AuthError as e:
        print(f"  [!] {e.message}", file=sys.stderr)
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
