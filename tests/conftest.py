import pytest

from member_sync.database.repository import InMemoryMemberRepository
from member_sync.ingestion.unitedstates import LegislatorDatasetCache

from tests.factories import DAY_MILLIS, FakeClock, FakeTransport, full_responses


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return FakeTransport(full_responses())


@pytest.fixture
def legislator_cache(clock):
    return LegislatorDatasetCache(clock=clock, max_age_millis=DAY_MILLIS)


@pytest.fixture
def repository():
    return InMemoryMemberRepository()
