import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.counter import Counter

logger = logging.getLogger(__name__)


async def _increment(db: AsyncSession, name: str):
    result = await db.execute(
        update(Counter)
        .where(Counter.name == name)
        .values(seq=Counter.seq + 1)
        .returning(Counter.seq)
    )
    return result.scalar_one_or_none()


async def next_sequence(db: AsyncSession, name: str) -> int:
    """
    Atomically increment and return the counter for ``name``.

    Runs inside the caller's transaction; the caller commits together with
    the row that uses the id. Allocate the id before adding anything else to
    the session: losing the race to create a missing counter rolls the
    transaction back before retrying.
    """
    seq = await _increment(db, name)
    if seq is not None:
        return seq

    db.add(Counter(name=name, seq=1))
    try:
        await db.flush()
        return 1
    except IntegrityError:
        # another request created the counter first
        logger.info(f"Counter {name} created concurrently, retrying increment")
        await db.rollback()

    seq = await _increment(db, name)
    if seq is None:
        raise RuntimeError(f"Counter {name} vanished while allocating an id")
    return seq
