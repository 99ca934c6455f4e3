"""
Create a staff user (admin or manager); self-registration only creates customers.
Run from project root:
  python -m auth_service.scripts.create_user FIRST LAST EMAIL PASSWORD [role]
Example:
  python -m auth_service.scripts.create_user Ada Admin admin@example.com your-secure-password admin
"""
import argparse
import sys

from dotenv import load_dotenv

from auth_service.core.config import get_settings
from auth_service.core.database import Database
from auth_service.core.errors import AuthServiceError
from auth_service.models.user import Role
from auth_service.schemas.auth import RegisterRequest
from auth_service.services.users import UserDirectory
from auth_service.validation import validate_body


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an auth-service user from the command line.")
    parser.add_argument("first_name", help="First name")
    parser.add_argument("last_name", help="Last name")
    parser.add_argument("email", help="Email (must be unused)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.ADMIN.value,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args(argv)

    result = validate_body(
        RegisterRequest,
        {
            "firstName": args.first_name,
            "lastName": args.last_name,
            "email": args.email,
            "password": args.password,
        },
    )
    if not result.ok:
        for err in result.errors:
            print(f"{err.path}: {err.msg}", file=sys.stderr)
        return 1

    load_dotenv()
    settings = get_settings()
    database = Database.from_settings(settings)
    db = database.session()
    try:
        user = UserDirectory(db, bcrypt_rounds=settings.BCRYPT_ROUNDS).create(
            result.value, role=Role(args.role)
        )
    except AuthServiceError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
        database.dispose()
    print(f"Created user '{user.email}' (id={user.id}) with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
