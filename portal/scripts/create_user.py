"""
Create an account (e.g. the first admin). Run from project root:
  python -m portal.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m portal.scripts.create_user admin your-secure-password admin

This is the bootstrap path for administrators: the HTTP API only lets an
existing administrator create or promote another one.
"""
import argparse
import asyncio
import logging
import sys
from datetime import timedelta

from portal.core.config import get_settings
from portal.errors import ConflictError, StorageError, ValidationError
from portal.services.identity import IdentityManager
from portal.storage import build_storage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


async def _create(identity: IdentityManager, username: str, password: str, role: str) -> int:
    account = await identity.register(username, password)
    if role != "user":
        # The CLI operator stands in for an administrator.
        account = await identity.accounts.set_role(account.id, role)
    print(f"Created user '{account.username}' (id {account.id}) with role '{account.role}'.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Portal account.")
    parser.add_argument("username", help="Username (3-50 chars)")
    parser.add_argument("password", help="Password (at least 6 chars)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    args = parser.parse_args()

    settings = get_settings()
    if settings.STORAGE_BACKEND != "database":
        print(
            "STORAGE_BACKEND is not 'database'; an account created here would be lost on exit.",
            file=sys.stderr,
        )
        return 1

    storage = build_storage(settings)
    identity = IdentityManager(
        storage.accounts,
        storage.sessions,
        session_ttl=timedelta(hours=settings.SESSION_TTL_HOURS),
    )
    try:
        return asyncio.run(_create(identity, args.username.strip(), args.password, args.role))
    except (ValidationError, ConflictError) as e:
        print(e.message, file=sys.stderr)
        return 1
    except StorageError as e:
        logger.error("Could not create user: %s", e.message)
        return 1
    finally:
        storage.close()


if __name__ == "__main__":
    sys.exit(main())
