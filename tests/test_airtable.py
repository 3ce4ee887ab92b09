"""
Tests for the records-store client.
"""

from unittest.mock import MagicMock

import pytest
import requests

from arrestpub.airtable import AirtableClient
from arrestpub.model import RecordsStoreError


def make_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    response.text = str(payload)
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return AirtableClient("patKEY", "appBASE", timeout=12.5, session=session)


def test_list_records_follows_pagination(client, session):
    """Test that listing follows offsets."""
    session.request.side_effect = [
        make_response(payload={"records": [{"id": "rec1"}], "offset": "itr1"}),
        make_response(payload={"records": [{"id": "rec2"}]}),
    ]

    records = client.list_records(
        "Bookings",
        formula="{Status} = 'Active'",
        sort=[{"field": "Priority", "direction": "desc"}],
        view="Grid view",
    )

    assert [r["id"] for r in records] == ["rec1", "rec2"]
    assert session.request.call_count == 2

    method, url = session.request.call_args_list[0][0]
    kwargs = session.request.call_args_list[0][1]
    assert method == "GET"
    assert url == "https://api.airtable.com/v0/appBASE/Bookings"
    assert kwargs["timeout"] == 12.5
    assert kwargs["headers"]["Authorization"] == "Bearer patKEY"
    assert kwargs["params"]["filterByFormula"] == "{Status} = 'Active'"
    assert kwargs["params"]["sort[0][field]"] == "Priority"
    assert kwargs["params"]["sort[0][direction]"] == "desc"
    assert session.request.call_args_list[1][1]["params"]["offset"] == "itr1"


def test_table_names_are_quoted(client, session):
    """Test that table names with spaces are URL-encoded."""
    session.request.return_value = make_response(payload={"records": []})

    client.list_records("Pending Review")

    assert session.request.call_args[0][1].endswith("/appBASE/Pending%20Review")


def test_create_and_update_record(client, session):
    """Test record writes."""
    session.request.return_value = make_response(payload={"id": "recNEW", "fields": {"Title": "x"}})

    created = client.create_record("Advertisements", {"Title": "x"})
    client.update_record("Advertisements", "recNEW", {"Status": "Approved"})

    assert created["id"] == "recNEW"
    first, second = session.request.call_args_list
    assert first[0][0] == "POST"
    assert first[1]["json"] == {"fields": {"Title": "x"}}
    assert second[0] == ("PATCH", "https://api.airtable.com/v0/appBASE/Advertisements/recNEW")
    assert second[1]["json"] == {"fields": {"Status": "Approved"}}


def test_http_error_raises(client, session):
    """Test that HTTP errors carry status and payload."""
    session.request.return_value = make_response(403, {"error": {"type": "INVALID_PERMISSIONS"}})

    with pytest.raises(RecordsStoreError) as exc_info:
        client.get_record("Bookings", "rec1")

    assert exc_info.value.status_code == 403
    assert exc_info.value.payload == {"error": {"type": "INVALID_PERMISSIONS"}}


def test_network_error_raises(client, session):
    """Test that transport failures are wrapped."""
    session.request.side_effect = requests.exceptions.ConnectionError("unreachable")

    with pytest.raises(RecordsStoreError):
        client.list_records("Bookings")


def test_for_ads_falls_back_to_records_credentials(configured_config):
    """Test that the advertisement client reuses the records credentials."""
    client = AirtableClient.for_ads(configured_config)
    assert client.api_key == "patTESTKEY"
    assert client.base_id == "appTESTBASE"

    configured_config.ads.api_key = "patADS"
    configured_config.ads.base_id = "appADS"
    client = AirtableClient.for_ads(configured_config)
    assert client.api_key == "patADS"
    assert client.base_id == "appADS"
