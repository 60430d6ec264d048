"""Provision the demo tenants and accounts: ``python -m notesaas.seed``."""

import asyncio
import logging

from notesaas.core.database import async_session_factory, close_db, init_db
from notesaas.core.logging import setup_logging
from notesaas.services.accounts import DEMO_PASSWORD, seed_demo_data

logger = logging.getLogger(__name__)


async def _run() -> None:
    await init_db()
    async with async_session_factory() as session:
        tenants = await seed_demo_data(session)
    await close_db()
    for tenant in tenants:
        logger.info(
            "%s: admin@%s.com / user@%s.com (password: %s)",
            tenant.slug, tenant.slug, tenant.slug, DEMO_PASSWORD,
        )


def main() -> None:
    setup_logging()
    asyncio.run(_run())


if __name__ == "__main__":
    main()
