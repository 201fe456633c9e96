"""Tests for the source adapters: fetching and normalizing upstream records."""
import json

import httpx
import pytest

from member_sync.config.constants import (
    EXTRA_MEMBER_IDS,
    LEGISLATORS_CURRENT_URL,
    LEGISLATORS_HISTORICAL_URL,
    NO_PARTY_DATA,
    PROPUBLICA_BASE_URL,
)
from member_sync.errors import UpstreamUnavailable
from member_sync.ingestion import normalize
from member_sync.ingestion.bioguide import fetch_bioguide, normalize_bioguide
from member_sync.ingestion.pictures import LocalPictureStore, ProfilePictureFetcher, picture_url
from member_sync.ingestion.propublica import (
    fetch_propublica,
    list_congress_member_ids,
    normalize_propublica,
)
from member_sync.ingestion.transport import HttpTransport
from member_sync.ingestion.unitedstates import normalize_unitedstates
from member_sync.ingestion.user_override import normalize_user_override
from member_sync.models.member import Chamber, Gender, SourceKind

from tests.factories import (
    BIOGUIDE_URL,
    DAY_MILLIS,
    MEMBER_ID,
    PICTURE_URL,
    PROPUBLICA_URL,
    FakeTransport,
    bioguide_data,
    bioguide_job,
    legislator,
    propublica_data,
    propublica_role,
    yaml_body,
)


class TestBioguide:
    
    def test_keeps_congress_seats_only(self):
        jobs = [
            bioguide_job(116, "2019-01-03", "2021-01-03"),
            bioguide_job(117, "2021-01-03", "2023-01-03", name="Vice President"),
            bioguide_job(2, "1776-01-01", "1777-01-01", congress_type="ContinentalCongress"),
            bioguide_job(110, "2007-01-04", "2009-01-03", name="Delegate", state="GU"),
        ]
        record = normalize_bioguide(bioguide_data(jobs=jobs))
        
        assert record.id == MEMBER_ID
        assert record.first_name == "John"
        assert record.last_name == "Smith"
        assert [r.congress_numbers for r in record.congress_roles] == [[116], [110]]
        assert record.congress_roles[0].chamber == Chamber.SENATE
        assert record.congress_roles[1].chamber == Chamber.HOUSE
        assert record.congress_roles[1].state == "GU"
    
    def test_dates_fall_back_to_congress(self):
        job = bioguide_job(116, "2019-01-03", "2021-01-03")
        job["startDate"] = None
        job["endDate"] = ""
        
        role = normalize_bioguide(bioguide_data(jobs=[job])).congress_roles[0]
        
        assert role.start_date == "2019-01-03"
        assert role.end_date == "2021-01-03"
        assert role.parties[0].party == "Republican"
        assert role.parties[0].start_date == "2019-01-03"
    
    def test_missing_party_affiliation(self):
        job = bioguide_job(116, "2019-01-03", "2021-01-03")
        job["congressAffiliation"]["partyAffiliation"] = None
        
        role = normalize_bioguide(bioguide_data(jobs=[job])).congress_roles[0]
        
        assert [p.party for p in role.parties] == [NO_PARTY_DATA]
    
    def test_missing_id_is_rejected(self):
        with pytest.raises(ValueError):
            normalize_bioguide({"givenName": "John"})
    
    @pytest.mark.asyncio
    async def test_fetch_returns_data_object(self):
        transport = FakeTransport({BIOGUIDE_URL: json.dumps({"data": bioguide_data()}).encode()})
        
        data = await fetch_bioguide(transport, MEMBER_ID)
        
        assert data["usCongressBioId"] == MEMBER_ID
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"<html>oops</html>", b'{"data": null}'])
    async def test_fetch_rejects_unusable_bodies(self, body):
        transport = FakeTransport({BIOGUIDE_URL: body})
        
        with pytest.raises(UpstreamUnavailable):
            await fetch_bioguide(transport, MEMBER_ID)


class TestProPublica:
    
    def test_scalar_fields(self):
        record = normalize_propublica(propublica_data())
        
        assert record.first_name == "Jon"
        assert record.gender == Gender.MALE
        assert record.website == "https://www.smith.senate.gov"
        assert record.twitter_id == "SenSmith"
        assert record.congress_roles[0].senator_class == 1
        assert record.congress_roles[0].parties[0].party == "Republican"
    
    def test_party_switch_folds_into_one_role(self):
        roles = [
            propublica_role(117, "2021-06-01", "2023-01-03", party="I"),
            propublica_role(117, "2021-01-03", "2021-06-01", party="R"),
        ]
        record = normalize_propublica(propublica_data(roles=roles))
        
        assert len(record.congress_roles) == 1
        role = record.congress_roles[0]
        assert role.start_date == "2021-01-03"
        assert role.end_date == "2023-01-03"
        assert [p.party for p in role.parties] == ["Independent", "Republican"]
    
    def test_house_roles(self):
        roles = [
            propublica_role(117, "2021-01-03", "2023-01-03", chamber="House",
                            title="Representative", state="UT", senate_class=None, district="3"),
            propublica_role(116, "2019-01-03", "2021-01-03", chamber="House",
                            title="Delegate", state="GU", senate_class=None, district="At-Large"),
            propublica_role(115, "2017-01-03", "2019-01-03", chamber="House",
                            title="Resident Commissioner", state="PR", senate_class=None),
        ]
        record = normalize_propublica(propublica_data(roles=roles))
        
        assert [(r.state, r.district) for r in record.congress_roles] == [("UT", 3), ("GU", 0)]
    
    @pytest.mark.asyncio
    async def test_fetch_returns_first_result(self):
        transport = FakeTransport({
            PROPUBLICA_URL: json.dumps({"status": "OK", "results": [propublica_data()]}).encode()
        })
        
        data = await fetch_propublica(transport, MEMBER_ID)
        
        assert data["id"] == MEMBER_ID
    
    @pytest.mark.asyncio
    async def test_error_status_is_unavailable(self):
        body = {"status": "ERROR", "errors": [{"error": "Record not found"}]}
        transport = FakeTransport({PROPUBLICA_URL: json.dumps(body).encode()})
        
        with pytest.raises(UpstreamUnavailable, match="Record not found"):
            await fetch_propublica(transport, MEMBER_ID)
    
    @pytest.mark.asyncio
    async def test_list_congress_member_ids(self):
        url = f"{PROPUBLICA_BASE_URL}/117/senate/members.json"
        body = {"status": "OK", "results": [{"members": [{"id": "A000360"}, {"id": MEMBER_ID}, {}]}]}
        transport = FakeTransport({url: json.dumps(body).encode()})
        
        ids = await list_congress_member_ids(transport, Chamber.SENATE, 117)
        
        assert ids == ["A000360", MEMBER_ID]


class TestUnitedStates:
    
    def test_terms_have_no_congress_numbers(self):
        record = normalize_unitedstates(legislator())
        
        role = record.congress_roles[0]
        assert role.congress_numbers == []
        assert role.chamber == Chamber.SENATE
        assert role.senator_class == 1
        assert role.end_date == "2025-01-03"
        assert record.gender == Gender.MALE
    
    def test_party_affiliations_and_districts(self):
        terms = [{
            "type": "rep",
            "start": "2021-01-03",
            "end": "2023-01-03",
            "state": "UT",
            "district": 3,
            "party": "Republican",
            "party_affiliations": [
                {"start": "2021-01-03", "end": "2022-02-01", "party": "Republican"},
                {"start": "2022-02-01", "end": "2023-01-03", "party": "Independent"},
            ],
        }]
        role = normalize_unitedstates(legislator(terms=terms)).congress_roles[0]
        
        assert role.chamber == Chamber.HOUSE
        assert role.district == 3
        assert [p.party for p in role.parties] == ["Republican", "Independent"]
        assert role.parties[1].start_date == "2022-02-01"
    
    @pytest.mark.asyncio
    async def test_cache_refetches_when_stale(self, clock, legislator_cache):
        transport = FakeTransport({
            LEGISLATORS_CURRENT_URL: yaml_body([legislator()]),
            LEGISLATORS_HISTORICAL_URL: yaml_body([legislator("A000001", "Abe")]),
        })
        
        await legislator_cache.get(transport)
        await legislator_cache.get(transport)
        assert transport.count(LEGISLATORS_CURRENT_URL) == 1
        
        clock.advance(DAY_MILLIS + 1)
        assert not legislator_cache.is_fresh()
        
        dataset = await legislator_cache.get(transport)
        assert transport.count(LEGISLATORS_CURRENT_URL) == 2
        assert dataset.fetched_at == clock()
        assert set(dataset.by_id) == {MEMBER_ID, "A000001"}
    
    @pytest.mark.asyncio
    async def test_unquoted_yaml_dates(self, legislator_cache):
        body = (
            b"- id: {bioguide: S000622}\n"
            b"  name: {first: John, last: Smith}\n"
            b"  bio: {birthday: 1960-05-01}\n"
            b"  terms:\n"
            b"  - {type: sen, start: 2019-01-03, end: 2025-01-03, state: UT, class: 1, party: Republican}\n"
        )
        transport = FakeTransport({LEGISLATORS_CURRENT_URL: body, LEGISLATORS_HISTORICAL_URL: b"[]"})
        
        raw = await legislator_cache.fetch_member(transport, MEMBER_ID)
        record = normalize_unitedstates(raw)
        
        assert record.birthday == "1960-05-01"
        assert record.congress_roles[0].start_date == "2019-01-03"
    
    @pytest.mark.asyncio
    async def test_unknown_member(self, legislator_cache):
        transport = FakeTransport({
            LEGISLATORS_CURRENT_URL: yaml_body([]),
            LEGISLATORS_HISTORICAL_URL: yaml_body([]),
        })
        
        with pytest.raises(UpstreamUnavailable, match="doesn't exist"):
            await legislator_cache.fetch_member(transport, MEMBER_ID)
    
    @pytest.mark.asyncio
    async def test_member_ids_include_known_gaps(self, legislator_cache):
        transport = FakeTransport({
            LEGISLATORS_CURRENT_URL: yaml_body([legislator()]),
            LEGISLATORS_HISTORICAL_URL: yaml_body([]),
        })
        
        ids = await legislator_cache.list_member_ids(transport)
        
        assert ids == [MEMBER_ID] + EXTRA_MEMBER_IDS


class TestUserOverride:
    
    def test_keeps_scalars_only(self):
        record = normalize_user_override({
            "id": MEMBER_ID,
            "first_name_zh": "  约翰 ",
            "nickname": "   ",
            "congress_roles": [{"chamber": "senate", "start_date": "2019-01-03", "end_date": "2025-01-03"}],
        })
        
        assert record.id == MEMBER_ID
        assert record.first_name_zh == "约翰"
        assert record.nickname is None
        assert record.congress_roles == []
    
    def test_gender_codes_and_invalid_values(self, caplog):
        record = normalize_user_override({"id": MEMBER_ID, "gender": "F", "office": 12, "nickname": "Jack"})
        
        assert record.gender == Gender.FEMALE
        assert record.office is None
        assert record.nickname == "Jack"
        assert f"{MEMBER_ID} office: dropping invalid value 12" in caplog.text
    
    def test_missing_id_is_rejected(self):
        with pytest.raises(ValueError):
            normalize_user_override({"nickname": "Jack"})
    
    def test_dispatch_by_source(self):
        record = normalize(SourceKind.USER_OVERRIDE, {"id": MEMBER_ID, "last_name_zh": "史密斯"})
        assert record.last_name_zh == "史密斯"
        
        record = normalize(SourceKind.PROPUBLICA, propublica_data())
        assert record.first_name == "Jon"


class TestPictures:
    
    def test_picture_url(self):
        assert picture_url(MEMBER_ID) == PICTURE_URL
    
    @pytest.mark.asyncio
    async def test_download_is_stored(self, tmp_path):
        store = LocalPictureStore(base_path=str(tmp_path), base_uri="https://img.example.org/pics/")
        fetcher = ProfilePictureFetcher(FakeTransport({PICTURE_URL: b"\xff\xd8jpeg"}), store)
        
        uri = await fetcher(MEMBER_ID)
        
        assert uri == f"https://img.example.org/pics/{MEMBER_ID}.jpg"
        assert (tmp_path / f"{MEMBER_ID}.jpg").read_bytes() == b"\xff\xd8jpeg"
    
    @pytest.mark.asyncio
    async def test_empty_picture_is_a_failure(self, tmp_path):
        fetcher = ProfilePictureFetcher(FakeTransport({PICTURE_URL: b""}), LocalPictureStore(str(tmp_path)))
        
        with pytest.raises(UpstreamUnavailable):
            await fetcher(MEMBER_ID)


class TestHttpTransport:
    
    @staticmethod
    def _transport(handler):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return client, HttpTransport(client=client, cool_down=0)
    
    @pytest.mark.asyncio
    async def test_returns_body(self):
        client, transport = self._transport(lambda request: httpx.Response(200, content=b"ok"))
        async with client:
            assert await transport.fetch(BIOGUIDE_URL) == b"ok"
    
    @pytest.mark.asyncio
    async def test_non_200_is_unavailable(self):
        client, transport = self._transport(lambda request: httpx.Response(404))
        async with client:
            with pytest.raises(UpstreamUnavailable, match="HTTP 404"):
                await transport.fetch(BIOGUIDE_URL)
    
    @pytest.mark.asyncio
    async def test_network_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        
        client, transport = self._transport(handler)
        async with client:
            with pytest.raises(UpstreamUnavailable, match="ConnectError"):
                await transport.fetch(BIOGUIDE_URL)
