import pytest
from eth_account import Account
from app import create_app
from config import Config
from src.utils.cache import InMemoryStore

NOW = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to"""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryStore(clock=clock)


@pytest.fixture
def signer_account():
    return Account.create()


@pytest.fixture
def cfg(signer_account):
    return Config(
        VERIFIER_PRIVATE_KEY=signer_account.key.hex(),
        STORE_BACKEND='memory',
        RATE_LIMIT_ENABLED=True
    )


@pytest.fixture
def app(cfg, clock):
    app = create_app(cfg, clock=clock)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def unsigned_client(clock):
    app = create_app(Config(VERIFIER_PRIVATE_KEY=None, STORE_BACKEND='memory'), clock=clock)
    app.config['TESTING'] = True
    return app.test_client()
