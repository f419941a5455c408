import pytest
from sqlalchemy import select

from app.db.database import AsyncSessionLocal
from app.models.counter import Counter
from app.services import sequences


@pytest.mark.asyncio
async def test_first_use_creates_the_counter(db):
    assert await sequences.next_sequence(db, "ads") == 1
    assert await sequences.next_sequence(db, "ads") == 2
    assert await sequences.next_sequence(db, "tickets") == 1
    await db.commit()


@pytest.mark.asyncio
async def test_counter_created_concurrently_is_incremented_instead(db, monkeypatch):
    real_increment = sequences._increment
    calls = []

    async def increment_after_other_request_creates_counter(session, name):
        calls.append(name)
        if len(calls) == 1:
            # another request creates the counter between our update and our insert
            async with AsyncSessionLocal() as other:
                other.add(Counter(name=name, seq=1))
                await other.commit()
            return None
        return await real_increment(session, name)

    monkeypatch.setattr(sequences, "_increment", increment_after_other_request_creates_counter)

    assert await sequences.next_sequence(db, "traders") == 2
    await db.commit()

    async with AsyncSessionLocal() as check:
        counter = (await check.execute(select(Counter).where(Counter.name == "traders"))).scalar_one()
    assert counter.seq == 2
    assert len(calls) == 2
