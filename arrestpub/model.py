"""
Data models for the jail activity publisher.
"""

from typing import Any, Dict, List, Optional, TypedDict


class ChargeEntry(TypedDict):
    """
    Represents one charge within a booking.
    """

    description: str  # Free-text offense description
    bond_amount: Optional[str]  # Raw bond text, display-only
    degree: Optional[str]  # Classification paired by position with description


class BookingRecord(TypedDict, total=False):
    """
    Represents one arrested individual for one booking event.
    """

    id: str  # Opaque records-store identifier
    full_name: str  # Format: "LAST, FIRST MIDDLE" or as stored
    age: Optional[str]
    sex: Optional[str]
    race: Optional[str]
    height: Optional[str]
    weight: Optional[str]
    eye_color: Optional[str]
    hair_color: Optional[str]
    booking_date: str  # ISO 8601 format (YYYY-MM-DD), always present
    booking_time: Optional[str]  # 24-hour HH:MM, None when the store has no time
    release_date: Optional[str]  # None means still in custody
    release_time: Optional[str]
    charges: List[ChargeEntry]  # Original listing order
    mugshot_url: Optional[str]  # Validated http(s) image URL or None
    arresting_agency: Optional[str]
    detail_link: Optional[str]


class AdvertisementRecord(TypedDict, total=False):
    """
    Represents a moderatable advertisement campaign.
    """

    id: Optional[str]
    title: str
    description: str
    target_url: str
    image_url: Optional[str]
    advertiser_name: str
    status: str  # One of AD_STATUSES
    start_date: Optional[str]  # YYYY-MM-DD
    end_date: Optional[str]  # YYYY-MM-DD
    priority: int
    click_count: int
    button_text: str
    is_fallback: bool


STATUS_PENDING = "Pending Review"
STATUS_APPROVED = "Approved"
STATUS_ACTIVE = "Active"
STATUS_REJECTED = "Rejected"

AD_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_ACTIVE, STATUS_REJECTED)


class PublishResult:
    """Result of a CMS post submission."""

    def __init__(self, id: str, url: Optional[str], status: str, title: str):
        self.id = id
        self.url = url
        self.status = status
        self.title = title

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "id": self.id,
            "url": self.url,
            "status": self.status,
            "title": self.title,
        }


class ArrestPubError(Exception):
    """Base class for all arrestpub exceptions."""

    pass


class ConfigError(ArrestPubError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = missing or []


class RecordsStoreError(ArrestPubError):
    """Exception raised when the records store cannot be queried or updated."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class ChargeParseError(ArrestPubError):
    """Exception raised when charge and degree fields cannot be paired."""

    pass


class AdValidationError(ArrestPubError):
    """Exception raised when an advertisement submission or review is rejected."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.message, "field": self.field}


class PublishError(ArrestPubError):
    """Exception raised for CMS publishing errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
