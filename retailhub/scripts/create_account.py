"""
Create an employee account (e.g. the first administrator). Run from project root:
  python -m retailhub.scripts.create_account USERNAME PASSWORD ROLE_ID EMPLOYEE_ID
Example:
  python -m retailhub.scripts.create_account admin secret123 1 1
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from retailhub.core.config import get_settings
from retailhub.core.database import SessionLocal
from retailhub.core.errors import AuthError
from retailhub.core.tokens import TokenCodec
from retailhub.repositories.accounts import SqlAlchemyAccountStore
from retailhub.schemas.auth import RegisterRequest
from retailhub.services.auth import AccountRegistrar

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an employee account (no registration UI).")
    parser.add_argument("username", help="Username (4-20 letters)")
    parser.add_argument("password", help="Password (6-20 chars, letters and numbers)")
    parser.add_argument("role_id", type=int, help="Role id")
    parser.add_argument("employee_id", type=int, help="Employee id (must not have an account yet)")
    args = parser.parse_args()

    try:
        body = RegisterRequest(
            username=args.username,
            password=args.password,
            role_id=args.role_id,
            employee_id=args.employee_id,
        )
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        registrar = AccountRegistrar(SqlAlchemyAccountStore(db), TokenCodec.from_settings(get_settings()))
        result = registrar.register(
            body.username,
            body.password,
            role_id=body.role_id,
            employee_id=body.employee_id,
        )
        print(f"Created account '{result.account.username}' (id {result.account.id}).")
        return 0
    except AuthError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
