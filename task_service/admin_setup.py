"""
Privileged flow for creating administrators.

Registration over HTTP never grants the admin role unless the operator
opts in with ``ALLOW_ADMIN_SIGNUP``; this command is the supported way to
create an admin or promote an existing account::

    python -m task_service.admin_setup --email ops@example.com --password ...
"""

import argparse
import asyncio
import logging
import sys
import uuid
from datetime import datetime, timezone

from task_service.database import database, engine, metadata
from task_service.models import users, Role
from task_service.security import hash_password

logger = logging.getLogger("task-service")


async def ensure_admin(email: str, password: str) -> str:
    """Create ``email`` as an admin, or promote it if it already exists.

    Returns the user id. An existing account keeps its password.
    """
    email = email.strip().lower()
    now = datetime.now(timezone.utc)

    existing = await database.fetch_one(users.select().where(users.c.email == email))
    if existing:
        await database.execute(
            users.update().where(users.c.id == existing["id"]).values(role=Role.admin.value, updated_at=now)
        )
        logger.info(f"[Admin] Promoted {email} to admin")
        return existing["id"]

    user_id = str(uuid.uuid4())
    await database.execute(
        users.insert().values(
            id=user_id,
            email=email,
            password_hash=hash_password(password),
            role=Role.admin.value,
            created_at=now,
            updated_at=now,
        )
    )
    logger.info(f"[Admin] Created admin {email}")
    return user_id


async def _main(email: str, password: str) -> None:
    metadata.create_all(engine)
    await database.connect()
    try:
        user_id = await ensure_admin(email, password)
    finally:
        await database.disconnect()
    print(f"Admin ready: {email} ({user_id})")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an administrator account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    asyncio.run(_main(args.email, args.password))
    return 0


if __name__ == "__main__":
    sys.exit(main())
