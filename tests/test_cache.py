import time
from unittest import mock
import pytest
import redis
from config import Config
from src.utils.cache import InMemoryStore, RedisStore, create_store


def test_set_get_delete(store):
    store.set('a', 1)
    assert store.get('a') == 1

    store.delete('a')
    assert store.get('a') is None


def test_ttl_expiry(clock, store):
    store.set('a', 1, ttl_ms=100)

    clock.advance(99)
    assert store.get('a') == 1

    clock.advance(1)
    assert store.get('a') is None


def test_add_only_when_absent(clock, store):
    assert store.add('k', 'first', ttl_ms=100)
    assert not store.add('k', 'second', ttl_ms=100)
    assert store.get('k') == 'first'

    clock.advance(100)
    assert store.add('k', 'third')


def test_incr_keeps_first_expiry(clock, store):
    assert store.incr('c', 1000) == (1, clock.now + 1000)

    clock.advance(400)

    assert store.incr('c', 1000) == (2, clock.now + 600)


def test_keys_and_purge(clock, store):
    store.set('nonce:1', 1, ttl_ms=10)
    store.set('nonce:2', 2)
    store.set('other', 3)

    assert sorted(store.keys('nonce:')) == ['nonce:1', 'nonce:2']

    clock.advance(10)
    assert store.purge_expired() == 1
    assert len(store) == 2


def test_create_store_memory():
    assert isinstance(create_store(Config(STORE_BACKEND='memory')), InMemoryStore)


@pytest.fixture
def redis_client():
    client = mock.MagicMock()
    client.ping.return_value = True
    return client


def test_redis_add_uses_set_nx(redis_client):
    redis_client.set.return_value = True
    store = RedisStore(client=redis_client)

    assert store.add('nonce:1', 5, ttl_ms=1000)
    redis_client.set.assert_called_with('nonce:1', 5, nx=True, px=1000)

    redis_client.set.return_value = None
    assert not store.add('nonce:1', 5, ttl_ms=1000)


def test_redis_incr_sets_expiry_on_first_hit(redis_client, clock):
    pipe = redis_client.pipeline.return_value
    pipe.execute.return_value = [1, -1]
    store = RedisStore(client=redis_client, clock=clock)

    assert store.incr('ratelimit:claim:x', 60000) == (1, clock.now + 60000)
    redis_client.pexpire.assert_called_once_with('ratelimit:claim:x', 60000)


def test_redis_incr_reuses_remaining_ttl(redis_client, clock):
    pipe = redis_client.pipeline.return_value
    pipe.execute.return_value = [4, 30000]
    store = RedisStore(client=redis_client, clock=clock)

    assert store.incr('ratelimit:claim:x', 60000) == (4, clock.now + 30000)
    redis_client.pexpire.assert_not_called()


def test_redis_keys_scans_prefix(redis_client):
    redis_client.scan_iter.return_value = iter(['nonce:1', 'nonce:2'])
    store = RedisStore(client=redis_client)

    assert store.keys('nonce:') == ['nonce:1', 'nonce:2']
    redis_client.scan_iter.assert_called_with(match='nonce:*')


def test_redis_ping_is_retried(redis_client, monkeypatch):
    monkeypatch.setattr(time, 'sleep', lambda seconds: None)
    redis_client.ping.side_effect = [redis.exceptions.ConnectionError("down"), True]

    RedisStore(client=redis_client)

    assert redis_client.ping.call_count == 2


def test_redis_ping_gives_up(redis_client, monkeypatch):
    monkeypatch.setattr(time, 'sleep', lambda seconds: None)
    redis_client.ping.side_effect = redis.exceptions.ConnectionError("down")

    with pytest.raises(redis.exceptions.ConnectionError):
        RedisStore(client=redis_client)

    assert redis_client.ping.call_count == 3
