"""
Sample booking data for local previews.

Records are already in canonical shape, as the fetcher would return them.
"""

import copy
import re
from typing import Dict, List, Optional

from arrestpub.fetcher import sort_key
from arrestpub.model import AdvertisementRecord, BookingRecord, ChargeEntry

SAMPLE_DATE = "2023-12-19"


def _charge(description: str, bond: str) -> ChargeEntry:
    return {"description": description, "bond_amount": bond, "degree": None}


def _record(record_id: str, name: str, age: int, city: str, height: str, weight: str,
            booking_time: str, release_time: Optional[str], mugshot: Optional[str],
            charges: List[ChargeEntry]) -> BookingRecord:
    return {
        "id": record_id,
        "full_name": name,
        "age": str(age),
        "sex": None,
        "race": None,
        "height": height,
        "weight": weight,
        "eye_color": None,
        "hair_color": None,
        "booking_date": SAMPLE_DATE,
        "booking_time": booking_time,
        "release_date": SAMPLE_DATE if release_time else None,
        "release_time": release_time,
        "charges": charges,
        "mugshot_url": mugshot,
        "arresting_agency": f"{city} Police Department",
        "detail_link": None,
    }


SAMPLE_RECORDS: List[BookingRecord] = [
    _record("rec1234567890", "Smith, John Michael", 32, "Lufkin", "5'10\"", "175 lbs", "14:30", None,
            "https://via.placeholder.com/150x180/cccccc/666666?text=J.Smith",
            [_charge("Driving While Intoxicated", "2500.00"),
             _charge("Failure to Maintain Financial Responsibility", "500.00")]),
    _record("rec2345678901", "Doe, Jane Elizabeth", 28, "Huntington", "5'6\"", "140 lbs", "08:15", "16:45",
            "https://via.placeholder.com/150x180/dddddd/777777?text=J.Doe",
            [_charge("Theft of Property", "1000.00")]),
    _record("rec3456789012", "Johnson, Robert Lee", 45, "Nacogdoches", "6'2\"", "220 lbs", "22:10", None,
            None,
            [_charge("Assault - Family Violence", "5000.00"),
             _charge("Public Intoxication", "750.00")]),
    _record("rec4567890123", "Williams, Sarah Michelle", 24, "Diboll", "5'4\"", "125 lbs", "11:20", "19:30",
            "https://via.placeholder.com/150x180/eeeeee/888888?text=S.Williams",
            [_charge("Possession of Controlled Substance", "2000.00")]),
    _record("rec5678901234", "Brown, Michael David", 38, "Lufkin", "5'8\"", "185 lbs", "03:45", None,
            "https://via.placeholder.com/150x180/cccccc/555555?text=M.Brown",
            [_charge("Burglary of Habitation", "15000.00"),
             _charge("Criminal Trespass", "1500.00"),
             _charge("Evading Arrest or Detention", "3000.00")]),
]

MOCK_ADVERTISEMENT: AdvertisementRecord = {
    "id": "recAD12345678",
    "title": "Local Business Advertisement",
    "description": "Visit our local business for great deals!",
    "target_url": "https://example-local-business.com",
    "image_url": "https://via.placeholder.com/600x200/007acc/ffffff?text=Sample+Advertisement",
    "advertiser_name": "Sample Local Business",
    "status": "Active",
    "start_date": None,
    "end_date": None,
    "priority": 50,
    "click_count": 0,
    "button_text": "Learn More",
    "is_fallback": False,
}


def _shift_time(value: str, hours: int) -> str:
    """Move a booking time later within the same day, stopping at 23:59."""
    hour, minute = (int(part) for part in value.split(":"))
    total = min(hour * 60 + minute + hours * 60, 23 * 60 + 59)
    return f"{total // 60:02d}:{total % 60:02d}"


def _many_arrests() -> List[BookingRecord]:
    records = copy.deepcopy(SAMPLE_RECORDS)
    for index, record in enumerate(SAMPLE_RECORDS):
        extra = copy.deepcopy(record)
        extra["id"] = f"rec{6789012345 + index}"
        extra["full_name"] = re.sub(r"^(\w+), (\w+)", rf"\g<1>{index + 6}, \g<2>", record["full_name"])
        extra["age"] = str(int(record["age"]) + index)
        extra["booking_time"] = _shift_time(record["booking_time"], index)
        records.append(extra)
    return records


def _no_mugshots() -> List[BookingRecord]:
    records = copy.deepcopy(SAMPLE_RECORDS)
    for record in records:
        record["mugshot_url"] = None
    return records


def _all_released() -> List[BookingRecord]:
    records = copy.deepcopy(SAMPLE_RECORDS)
    for record in records:
        record["release_date"] = SAMPLE_DATE
        record["release_time"] = "20:00"
    return records


SCENARIOS = {
    "default": lambda: copy.deepcopy(SAMPLE_RECORDS),
    "noArrests": lambda: [],
    "singleArrest": lambda: copy.deepcopy(SAMPLE_RECORDS[:1]),
    "manyArrests": _many_arrests,
    "mixedReleases": lambda: copy.deepcopy(SAMPLE_RECORDS),
    "noMugshots": _no_mugshots,
    "allReleased": _all_released,
}


def get_scenario(name: Optional[str] = None) -> List[BookingRecord]:
    """
    Return the records of a named scenario in fetch order (ascending booking time).

    Args:
        name: Scenario name, "default" when empty

    Returns:
        Fresh list of records

    Raises:
        KeyError: If the scenario is unknown
    """
    name = name or "default"
    if name not in SCENARIOS:
        raise KeyError(f"Unknown scenario: {name}")
    return sorted(SCENARIOS[name](), key=sort_key)


def scenario_names() -> List[str]:
    return list(SCENARIOS)


def mock_advertisement() -> Dict:
    return dict(MOCK_ADVERTISEMENT)
