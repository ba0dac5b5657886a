import pytest

from fakes import FEED_ID, PACKAGE_ID


@pytest.fixture
def package_id():
    return PACKAGE_ID


@pytest.fixture
def feed_id():
    return FEED_ID
