"""Sample upstream payloads and test doubles."""
import json

import yaml

from member_sync.config.constants import LEGISLATORS_CURRENT_URL, LEGISLATORS_HISTORICAL_URL
from member_sync.errors import UpstreamUnavailable
from member_sync.models.member import Chamber, PartyRecord, RoleRecord

MEMBER_ID = "S000622"

BIOGUIDE_URL = f"https://bioguide.congress.gov/search/bio/{MEMBER_ID}.json"
PROPUBLICA_URL = f"https://api.propublica.org/congress/v1/members/{MEMBER_ID}.json"
PICTURE_URL = f"https://bioguide.congress.gov/bioguide/photo/S/{MEMBER_ID}.jpg"

START_MILLIS = 1_700_000_000_000
DAY_MILLIS = 24 * 3600 * 1000


class FakeTransport:
    """Answers fetches from a URL -> bytes (or exception) table."""
    
    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
    
    async def fetch(self, url, headers=None, params=None):
        self.calls.append(url)
        response = self.responses.get(url)
        if response is None:
            raise UpstreamUnavailable("fake", f"no response for {url}")
        if isinstance(response, Exception):
            raise response
        return response
    
    def count(self, url):
        return self.calls.count(url)


class FakeClock:
    def __init__(self, now=START_MILLIS):
        self.now = now
    
    def __call__(self):
        return self.now
    
    def advance(self, millis):
        self.now += millis


# ----------------------------------------------------------------------------
# Sample payloads
# ----------------------------------------------------------------------------

def bioguide_job(congress, start, end, name="Senator", party="Republican", state="UT",
                 congress_type="USCongress"):
    return {
        "job": {"name": name},
        "startDate": start,
        "endDate": end,
        "congressAffiliation": {
            "congress": {
                "congressNumber": congress,
                "congressType": congress_type,
                "startDate": start,
                "endDate": end,
            },
            "partyAffiliation": [{"party": {"name": party}}],
            "represents": {"regionCode": state},
        },
    }


def bioguide_data(member_id=MEMBER_ID, given="John", jobs=None):
    if jobs is None:
        jobs = [
            bioguide_job(116, "2019-01-03", "2021-01-03"),
            bioguide_job(117, "2021-01-03", "2023-01-03"),
        ]
    return {
        "usCongressBioId": member_id,
        "givenName": given,
        "familyName": "Smith",
        "birthDate": "1960-05-01",
        "jobPositions": jobs,
    }


def propublica_role(congress, start, end, chamber="Senate", title="Senator, 1st Class",
                    party="R", state="UT", senate_class="1", district=None):
    role = {
        "congress": str(congress),
        "chamber": chamber,
        "title": title,
        "start_date": start,
        "end_date": end,
        "party": party,
        "state": state,
        "senate_class": senate_class,
    }
    if district is not None:
        role["district"] = district
    return role


def propublica_data(member_id=MEMBER_ID, first="Jon", roles=None):
    if roles is None:
        roles = [
            propublica_role(117, "2021-01-03", "2023-01-03"),
            propublica_role(116, "2019-01-03", "2021-01-03"),
        ]
    return {
        "id": member_id,
        "first_name": first,
        "last_name": "Smith",
        "gender": "M",
        "date_of_birth": "1960-05-01",
        "url": "https://www.smith.senate.gov",
        "phone": "202-224-0000",
        "twitter_account": "SenSmith",
        "roles": roles,
    }


def legislator(member_id=MEMBER_ID, first="John", terms=None):
    if terms is None:
        terms = [{
            "type": "sen",
            "start": "2019-01-03",
            "end": "2025-01-03",
            "state": "UT",
            "class": 1,
            "party": "Republican",
        }]
    return {
        "id": {"bioguide": member_id},
        "name": {"first": first, "last": "Smith"},
        "bio": {"gender": "M", "birthday": "1960-05-01"},
        "terms": terms,
    }


def bioguide_body(data=None):
    return json.dumps({"data": data if data is not None else bioguide_data()}).encode()


def propublica_body(data=None):
    return json.dumps({
        "status": "OK",
        "results": [data if data is not None else propublica_data()],
    }).encode()


def yaml_body(records):
    return yaml.safe_dump(records).encode()


def make_role(start, end, congress=(), chamber=Chamber.SENATE, state="UT",
              senator_class=None, district=None, party="Republican"):
    return RoleRecord(
        congress_numbers=list(congress),
        chamber=chamber,
        start_date=start,
        end_date=end,
        parties=[PartyRecord(party=party, start_date=start, end_date=end)],
        state=state,
        senator_class=senator_class,
        district=district,
    )


def full_responses(current=None, historical=None):
    """Every upstream answers for MEMBER_ID."""
    return {
        BIOGUIDE_URL: bioguide_body(),
        PROPUBLICA_URL: propublica_body(),
        LEGISLATORS_CURRENT_URL: yaml_body(current if current is not None else [legislator()]),
        LEGISLATORS_HISTORICAL_URL: yaml_body(historical if historical is not None else []),
    }


