"""
Create an Admin account out-of-band (e.g. the first admin). Run from project root:
  python -m accountkit.scripts.create_admin EMAIL PASSWORD [--name NAME]
Example:
  python -m accountkit.scripts.create_admin admin@example.com your-secure-password --name Ops
"""
import argparse
import logging
import sys

from accountkit.core.config import get_settings
from accountkit.core.database import SessionLocal
from accountkit.core.errors import AccountError
from accountkit.core.security import get_password_hasher, get_token_issuer
from accountkit.services.account_store import SqlAccountStore
from accountkit.services.accounts import AccountService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an Accountkit admin account.")
    parser.add_argument("email", help="Admin email address")
    parser.add_argument("password", help="Password")
    parser.add_argument("--name", default="", help="Display name")
    args = parser.parse_args(argv)

    settings = get_settings()
    db = SessionLocal()
    try:
        service = AccountService(
            store=SqlAccountStore(db),
            hasher=get_password_hasher(),
            tokens=get_token_issuer(),
            password_min_len=settings.PASSWORD_MIN_LEN,
            password_max_len=settings.PASSWORD_MAX_LEN,
        )
        account_id = service.create_admin(args.email, args.password, name=args.name)
    except AccountError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created admin '{args.email.strip().lower()}' with id {account_id}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
