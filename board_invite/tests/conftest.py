"""
Pytest configuration for board_invite tests.

Why: Force AnyIO to use the asyncio backend for the web adapter tests and
keep platform settings from the developer's shell out of the test run.
"""
import pytest

from board_invite.identity_access.domain import User
from board_invite.tests.utils.fake_platform import FakePlatform


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _isolate_platform_env(monkeypatch: pytest.MonkeyPatch):
    for key in (
        "MONDAY_API_URL",
        "MONDAY_API_TOKEN",
        "MONDAY_API_VERSION",
        "MONDAY_TIMEOUT",
        "MONDAY_CA_BUNDLE",
        "BOARD_LIST_LIMIT",
        "BOARD_INVITE_ENV",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def ada() -> User:
    return User(id="u-1", name="Ada Lovelace", email="Ada@Example.com")


@pytest.fixture
def grace() -> User:
    return User(id="u-2", name="Grace Hopper", email="grace@example.com")


@pytest.fixture
def platform(ada: User, grace: User) -> FakePlatform:
    return FakePlatform(users=[ada, grace])
