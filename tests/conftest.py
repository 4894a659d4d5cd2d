"""Shared fixtures: the shipped market calendar and a signer with a fixed test key."""

from datetime import datetime, timezone

import pytest  # type: ignore

from src.oracle.schedule.schedule_engine import ScheduleEngine
from src.oracle.signing.canonical_signer import CanonicalSigner
from src.utils.config.path_utils import PathUtils
from src.utils.exchange.market_calendar import MarketCalendar

# RFC 8032, section 7.1, test 1.
TEST_SEED_HEX = "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"
TEST_PUBLIC_HEX = "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"
TEST_KEY_ID = "key_test_v1"


def utc(year, month, day, hour=0, minute=0, second=0):
    """Shorthand for an aware UTC datetime."""
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def calendar():
    """The market calendar shipped in ``config/markets.json``."""
    return MarketCalendar.load(PathUtils.build("config/markets.json"))


@pytest.fixture
def engine(calendar):  # pylint: disable=redefined-outer-name
    """Schedule engine over the shipped calendar."""
    return ScheduleEngine(calendar)


@pytest.fixture
def signer():
    """Signer holding the RFC 8032 test key."""
    return CanonicalSigner(TEST_SEED_HEX, TEST_KEY_ID)
