import asyncio

from backend.tourbot.retrieval.sessions import (
    InMemorySessionRepository,
    append_turn,
    update_location,
)
from backend.tourbot.retrieval.types import Session


def test_history_keeps_most_recent_ten():
    session = Session(id="s1")
    for i in range(15):
        append_turn(session, "user" if i % 2 == 0 else "assistant", f"m{i}")
    assert len(session.history) == 10
    assert [turn.content for turn in session.history] == [f"m{i}" for i in range(5, 15)]


def test_custom_history_limit():
    session = Session(id="s1")
    for i in range(5):
        append_turn(session, "user", f"m{i}", limit=2)
    assert [turn.content for turn in session.history] == ["m3", "m4"]


def test_update_location_never_clears():
    session = Session(id="s1")
    assert update_location(session, "An Giang") is True
    assert update_location(session, None) is False
    assert session.last_location == "An Giang"
    assert update_location(session, "Đà Nẵng") is True
    assert session.last_location == "Đà Nẵng"


def test_repository_get_or_create_returns_same_session():
    repo = InMemorySessionRepository()
    first = repo.get_or_create("abc")
    first.last_location = "Huế"
    repo.save(first)
    assert repo.get_or_create("abc") is first
    assert "abc" in repo
    assert len(repo) == 1


def test_different_sessions_do_not_block_each_other():
    repo = InMemorySessionRepository()

    async def take_b():
        async with repo.lock("b"):
            return True

    async def scenario():
        async with repo.lock("a"):
            # would time out if "b" shared the lock with "a"
            return await asyncio.wait_for(take_b(), timeout=1)

    assert asyncio.run(scenario()) is True


def test_same_session_is_serialized():
    repo = InMemorySessionRepository()
    events: list[str] = []

    async def worker(name: str):
        async with repo.lock("shared"):
            events.append(f"{name}-start")
            await asyncio.sleep(0.01)
            events.append(f"{name}-end")

    async def scenario():
        await asyncio.gather(worker("one"), worker("two"))

    asyncio.run(scenario())
    assert events == ["one-start", "one-end", "two-start", "two-end"]
