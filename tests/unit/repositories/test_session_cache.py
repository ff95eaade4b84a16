"""
Tests for the bounded session cache.
"""
import pytest

from agent_bridge.domains.conversation import Session
from agent_bridge.repositories.session_cache import BoundedSessionCache


def test_evicts_oldest_inserted():
    cache = BoundedSessionCache(max_sessions=2)
    first, second, third = Session(), Session(), Session()
    for session in (first, second, third):
        cache.put(session)

    assert len(cache) == 2
    assert cache.get(first.id) is None
    assert list(cache) == [second.id, third.id]


def test_reads_do_not_refresh_position():
    cache = BoundedSessionCache(max_sessions=2)
    first, second = Session(), Session()
    cache.put(first)
    cache.put(second)
    cache.get(first.id)
    cache.put(Session())
    assert first.id not in cache
    assert second.id in cache


def test_delete_is_idempotent():
    cache = BoundedSessionCache()
    session = Session()
    cache.put(session)
    cache.delete(session.id)
    cache.delete(session.id)
    assert len(cache) == 0


def test_rejects_non_positive_capacity():
    with pytest.raises(ValueError):
        BoundedSessionCache(max_sessions=0)
