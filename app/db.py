"""MongoDB connection, Beanie document registration and batch writes."""
import logging

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from app.config import settings
from app.models import (
    User,
    Campus,
    School,
    Program,
    ClassGroup,
    Student,
    AttendanceRecord,
    Justification,
)

logger = logging.getLogger(__name__)

_client = None


async def db_startup():
    """Connect to MongoDB and initialize Beanie ODM."""
    global _client
    _client = AsyncIOMotorClient(settings.mongodb_url)
    await init_beanie(
        database=_client[settings.mongodb_db_name],
        document_models=[
            User,
            Campus,
            School,
            Program,
            ClassGroup,
            Student,
            AttendanceRecord,
            Justification,
        ],
    )


async def db_shutdown():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        _client = None


def get_client() -> AsyncIOMotorClient:
    if _client is None:
        raise RuntimeError("Database is not initialized")
    return _client


async def run_batch(writes):
    """Apply ``[(collection, [operations]), ...]`` as one unit.

    Runs inside a transaction when ``MONGODB_TRANSACTIONS`` is on, so either
    every operation lands or none does.
    """
    writes = [(collection, ops) for collection, ops in writes if ops]
    if not writes:
        return
    if not settings.mongodb_transactions:
        for collection, ops in writes:
            await collection.bulk_write(ops, ordered=True)
        return

    async with await get_client().start_session() as session:
        async with session.start_transaction():
            for collection, ops in writes:
                await collection.bulk_write(ops, ordered=True, session=session)
    logger.debug("Committed batch of %d operations", sum(len(ops) for _, ops in writes))
