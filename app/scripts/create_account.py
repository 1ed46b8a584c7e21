"""
Create a verified local account (e.g. the first operator, without going through email).
Run from project root:
  python -m app.scripts.create_account EMAIL PASSWORD [--name NAME]
Example:
  python -m app.scripts.create_account admin@example.org 'S3cure!pass' --name Admin
"""
import argparse
import sys

from pydantic import EmailStr, TypeAdapter, ValidationError

from app.core.database import session_scope
from app.core.exceptions import ConflictError
from app.core.security import hash_password
from app.repositories.accounts import AccountRepository
from app.schemas.auth import validate_password_strength


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a verified Userbase account.")
    parser.add_argument("email", help="Account email")
    parser.add_argument("password", help="Password (8-128 chars, mixed case, digit, special)")
    parser.add_argument("--name", default=None, help="Display name")
    args = parser.parse_args(argv)

    try:
        email = TypeAdapter(EmailStr).validate_python(args.email.strip())
    except ValidationError:
        print("Invalid email address.", file=sys.stderr)
        return 1
    try:
        validate_password_strength(args.password)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    with session_scope() as db:
        try:
            account = AccountRepository(db).create(
                email=email,
                password_hash=hash_password(args.password),
                name=args.name,
                is_email_verified=True,
            )
        except ConflictError:
            print(f"Account '{email}' already exists.", file=sys.stderr)
            return 1
        print(f"Created account '{account.email}' ({account.id}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
