"""
Pytest configuration and fixtures.
"""

from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from arrestpub.config import Config
from arrestpub.model import BookingRecord

GHOST_KEY_ID = "6489a1b2c3d4e5f6a7b8c9d0"
GHOST_SECRET = "a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f60718293a4b5c6d7e8f90"


@pytest.fixture
def sample_config() -> Config:
    """Return a configuration with defaults only."""
    return Config()


@pytest.fixture
def configured_config() -> Config:
    """Return a configuration with every credential present."""
    cfg = Config()
    cfg.airtable.api_key = "patTESTKEY"
    cfg.airtable.base_id = "appTESTBASE"
    cfg.ghost.admin_api_key = f"{GHOST_KEY_ID}:{GHOST_SECRET}"
    cfg.ghost.site_url = "https://example.ghost.io"
    return cfg


@pytest.fixture
def sample_record() -> BookingRecord:
    """Return a single canonical booking record."""
    return {
        "id": "recAAA111",
        "full_name": "DOE, JANE ELIZABETH",
        "age": "28",
        "sex": "F",
        "race": "W",
        "height": "5'6\"",
        "weight": "140",
        "eye_color": None,
        "hair_color": None,
        "booking_date": "2023-12-19",
        "booking_time": "08:15",
        "release_date": None,
        "release_time": None,
        "charges": [
            {"description": "Theft", "degree": "Class B", "bond_amount": "1000"},
            {"description": "Assault", "degree": "Class A", "bond_amount": "2500"},
        ],
        "mugshot_url": "https://images.example.com/mugshots/recAAA111.jpg",
        "arresting_agency": "Lufkin PD",
        "detail_link": None,
    }


def raw_row(record_id: str, name: str, booking: str, offenses: str = "", degrees: str = "",
            bonds: str = "", **extra) -> Dict[str, Any]:
    """Build a records-store row the way the API returns it."""
    fields: Dict[str, Any] = {"Name": name, "Booking Date": booking}
    if offenses:
        fields["Offenses"] = offenses
    if degrees:
        fields["Degrees"] = degrees
    if bonds:
        fields["Bond Amounts"] = bonds
    fields.update(extra)
    return {"id": record_id, "createdTime": "2023-12-20T06:00:00.000Z", "fields": fields}


@pytest.fixture
def raw_rows() -> List[Dict[str, Any]]:
    """Return three rows booked on 2023-12-19 (America/Chicago) plus one from the next day."""
    return [
        raw_row("recCCC333", "JOHNSON, ROBERT LEE", "2023-12-20T04:10:00.000Z",
                "Assault - Family Violence; Public Intoxication", "Class A; Class C", "5000; 750",
                Age=45),
        raw_row("recAAA111", "DOE, JANE ELIZABETH", "2023-12-19T14:15:00.000Z",
                "Theft; Assault", "Class B; Class A", "1000; 2500",
                Age=28, Sex="F", **{"Mugshot URL": "https://images.example.com/mugshots/recAAA111.jpg",
                                     "Release Date": "2023-12-19T22:45:00.000Z"}),
        raw_row("recBBB222", "SMITH, JOHN MICHAEL", "2023-12-19T20:30:00.000Z",
                "Public Intoxication", "Class C", "500",
                Age=32, **{"Mugshot URL": "https://via.placeholder.com/150x180?text=J.Smith"}),
        raw_row("recDDD444", "BROWN, MICHAEL DAVID", "2023-12-20T15:00:00.000Z",
                "Burglary of Habitation", "Felony 2", "15000"),
    ]


@pytest.fixture
def records_client(raw_rows):
    """Return a mock records-store client serving raw_rows."""
    client = MagicMock()
    client.list_records.return_value = raw_rows
    return client


@pytest.fixture
def ghost_client():
    """Return a mock CMS client that accepts every post."""
    client = MagicMock()
    client.create_post.side_effect = lambda post: {
        "id": "post123",
        "url": "https://example.ghost.io/angelina-county-arrests-tuesday/",
        "status": post["status"],
        "title": post["title"],
    }
    return client


def ad_row(record_id: str, status: str = "Active", priority: int = 50,
           start: str = "2023-12-01", end: str = "2023-12-31", **extra) -> Dict[str, Any]:
    """Build an advertisement row."""
    fields: Dict[str, Any] = {
        "Title": f"Ad {record_id}",
        "Ad Description": "Fresh local produce every day.",
        "Target URL": "https://farmstand.example.com",
        "Advertiser Name": "Farm Stand",
        "Status": status,
        "Start Date": start,
        "End Date": end,
        "Priority": priority,
        "Click Count": 3,
    }
    fields.update(extra)
    return {"id": record_id, "fields": fields}
