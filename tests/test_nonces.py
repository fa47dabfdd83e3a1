import threading
from src.security.nonces import ClaimNonceRegistry
from src.utils.cache import InMemoryStore


def test_sequential_nonces_are_distinct(clock, store):
    registry = ClaimNonceRegistry(store, clock=clock)

    nonces = [registry.generate() for _ in range(100)]

    assert len(set(nonces)) == 100
    assert nonces[0] == clock.now
    assert nonces == sorted(nonces)


def test_probe_starts_at_current_time(clock, store):
    registry = ClaimNonceRegistry(store, clock=clock)
    registry.generate()

    clock.advance(50)

    assert registry.generate() == clock.now


def test_recorded_value_is_skipped(clock, store):
    store.add(f"nonce:{clock.now}", 0)
    registry = ClaimNonceRegistry(store, clock=clock)

    assert registry.generate() == clock.now + 1


def test_registries_sharing_a_store_never_collide(clock, store):
    first = ClaimNonceRegistry(store, clock=clock)
    second = ClaimNonceRegistry(store, clock=clock)

    issued = [first.generate(), second.generate(), first.generate(), second.generate()]

    assert len(set(issued)) == 4


def test_records_expire_after_retention(clock, store):
    registry = ClaimNonceRegistry(store, retention_ms=1000, clock=clock)
    old = registry.generate()
    assert registry.contains(old)
    assert len(registry) == 1

    clock.advance(1000)
    registry.generate()

    assert not registry.contains(old)
    assert len(registry) == 1


def test_no_reissue_within_retention_even_if_clock_goes_back(clock, store):
    registry = ClaimNonceRegistry(store, clock=clock)
    first = registry.generate()

    clock.advance(-10)

    assert registry.generate() > first


def test_concurrent_generation_is_unique():
    registry = ClaimNonceRegistry(InMemoryStore())
    results = []
    lock = threading.Lock()

    def worker():
        local = [registry.generate() for _ in range(50)]
        with lock:
            results.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 400
    assert len(set(results)) == 400


def test_registry_uses_the_given_empty_store(clock, store):
    registry = ClaimNonceRegistry(store, clock=clock)

    assert registry.store is store
    nonce = registry.generate()
    assert store.get(f"nonce:{nonce}") == clock.now
