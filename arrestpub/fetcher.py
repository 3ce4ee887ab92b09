"""
Booking record fetcher.

Queries the records store for one publication-local calendar day and
normalizes each row into a canonical booking record.
"""

import datetime
from typing import Any, Dict, Iterable, List, Optional

from arrestpub.airtable import AirtableClient
from arrestpub.charges import parse_charges
from arrestpub.config import Config
from arrestpub.dates import local_day_bounds, parse_date, parse_time, split_moment
from arrestpub.log import get_logger
from arrestpub.model import BookingRecord, RecordsStoreError
from arrestpub.urls import is_valid_image_url

logger = get_logger(__name__)

NAME_NOT_PROVIDED = "Name not provided"

# Canonical field -> store columns, first non-empty wins
FIELD_ALIASES = {
    "age": ("Age",),
    "sex": ("Sex", "Gender"),
    "race": ("Race",),
    "height": ("Height",),
    "weight": ("Weight",),
    "eye_color": ("Eye Color",),
    "hair_color": ("Hair Color",),
    "arresting_agency": ("Arresting Agencies", "Arresting Agency"),
    "detail_link": ("Detail Link",),
}
NAME_FIELDS = ("Name", "Full Name")
OFFENSE_FIELDS = ("Offenses", "Charges")
DEGREE_FIELDS = ("Degrees", "Degree")
BOND_FIELDS = ("Bond Amounts", "Bond Amount")
MUGSHOT_URL_FIELDS = ("Mugshot URL", "Mugshot Url")
MUGSHOT_ATTACHMENT_FIELDS = ("Mugshot",)

BOOKING_DATE_FIELD = "Booking Date"


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, list):
        value = ", ".join(str(v) for v in value if v is not None)
    text = str(value).strip()
    return text or None


def _first(fields: Dict[str, Any], names: Iterable[str]) -> Optional[str]:
    for name in names:
        text = _text(fields.get(name))
        if text:
            return text
    return None


def build_full_name(fields: Dict[str, Any]) -> str:
    """
    Merge the combined or split name columns into a display name.

    Args:
        fields: Raw store fields

    Returns:
        "LAST, FIRST MIDDLE" for split columns, the combined value otherwise
    """
    combined = _first(fields, NAME_FIELDS)
    if combined:
        return combined

    last = _text(fields.get("Last Name"))
    first_middle = " ".join(
        part for part in (_text(fields.get("First Name")), _text(fields.get("Middle Name"))) if part
    )
    if last and first_middle:
        return f"{last}, {first_middle}"
    return last or first_middle or NAME_NOT_PROVIDED


def extract_mugshot_url(fields: Dict[str, Any]) -> Optional[str]:
    """
    Return the mugshot URL if the stored value is a usable image URL.
    """
    url = _first(fields, MUGSHOT_URL_FIELDS)
    if url is None:
        for name in MUGSHOT_ATTACHMENT_FIELDS:
            attachments = fields.get(name)
            if isinstance(attachments, list) and attachments and isinstance(attachments[0], dict):
                url = attachments[0].get("url")
                break

    if url and is_valid_image_url(url):
        return url.strip()
    if url:
        logger.debug(f"Discarding invalid mugshot URL: {url}")
    return None


def normalize_booking_record(raw: Dict[str, Any], cfg: Config) -> Optional[BookingRecord]:
    """
    Normalize a raw store row into a canonical booking record.

    Args:
        raw: Store record ({"id", "fields"})
        cfg: Configuration

    Returns:
        Booking record, or None when the row has no usable booking date
    """
    fields = raw.get("fields", {})
    tz = cfg.publication.timezone

    booking_date, booking_time = split_moment(_text(fields.get(BOOKING_DATE_FIELD)), tz)
    if booking_date is None:
        logger.warning(f"Skipping record {raw.get('id')}: missing or invalid booking date")
        return None
    if booking_time is None:
        booking_time = parse_time(_text(fields.get("Booking Time")))

    release_date, release_time = split_moment(_text(fields.get("Release Date")), tz)
    if release_date and release_time is None:
        release_time = parse_time(_text(fields.get("Release Time")))

    record: BookingRecord = {
        "id": raw.get("id", ""),
        "full_name": build_full_name(fields),
        "booking_date": booking_date,
        "booking_time": booking_time,
        "release_date": release_date,
        "release_time": release_time if release_date else None,
        "charges": parse_charges(
            _first(fields, OFFENSE_FIELDS),
            _first(fields, DEGREE_FIELDS),
            _first(fields, BOND_FIELDS),
            strict=cfg.parsing.strict_delimiters,
        ),
        "mugshot_url": extract_mugshot_url(fields),
    }
    for key, names in FIELD_ALIASES.items():
        record[key] = _first(fields, names)

    return record


def sort_key(record: BookingRecord):
    return (record["booking_date"], record.get("booking_time") or "", record.get("id", ""))


def build_date_formula(target_date: datetime.date, tz: str) -> str:
    """
    Build a filter formula bounding one local day, widened by a day on each
    side so date-only columns are never cut off; exact matching happens after
    normalization.
    """
    start, end = local_day_bounds(target_date, tz)
    start = start - datetime.timedelta(days=1)
    end = end + datetime.timedelta(days=1)
    return (
        f"AND(IS_AFTER({{{BOOKING_DATE_FIELD}}}, '{start.strftime('%Y-%m-%dT%H:%M:%SZ')}'), "
        f"IS_BEFORE({{{BOOKING_DATE_FIELD}}}, '{end.strftime('%Y-%m-%dT%H:%M:%SZ')}'))"
    )


def fetch_booking_records(client: AirtableClient, target_date, cfg: Config) -> List[BookingRecord]:
    """
    Fetch the booking records whose booking falls on the target date.

    Args:
        client: Records-store client
        target_date: Local calendar date (date or "YYYY-MM-DD")
        cfg: Configuration

    Returns:
        Booking records sorted by ascending booking time; empty when nothing matched

    Raises:
        RecordsStoreError: If the query fails
    """
    day = parse_date(target_date)
    logger.info(f"Fetching booking records for {day.isoformat()}")

    try:
        rows = client.list_records(
            cfg.airtable.table_id,
            formula=build_date_formula(day, cfg.publication.timezone),
            sort=[{"field": BOOKING_DATE_FIELD, "direction": "asc"}],
            view=cfg.airtable.view_id,
        )
    except RecordsStoreError as e:
        logger.error(f"Failed to fetch booking records: {e}")
        if e.payload:
            logger.error(f"Records store response: {e.payload}")
        raise

    records = []
    for row in rows:
        record = normalize_booking_record(row, cfg)
        if record is not None and record["booking_date"] == day.isoformat():
            records.append(record)
    records.sort(key=sort_key)

    logger.info(f"Found {len(records)} booking records for {day.isoformat()}")
    if not records:
        logger.info("No records found for target date. This may be normal for weekends or holidays.")
    return records
