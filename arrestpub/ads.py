"""
Advertisement service.

Reads the currently active campaign for an article and handles the
submission and moderation workflow against the advertisement table.
"""

import base64
import datetime
import re
from typing import Any, Dict, List, Mapping, Optional

from arrestpub.airtable import AirtableClient
from arrestpub.config import Config
from arrestpub.dates import parse_date
from arrestpub.log import get_logger
from arrestpub.model import (
    AD_STATUSES,
    STATUS_ACTIVE,
    STATUS_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
    AdValidationError,
    AdvertisementRecord,
    ConfigError,
)
from arrestpub.urls import is_absolute_url

logger = get_logger(__name__)

FALLBACK_ADVERTISEMENT: AdvertisementRecord = {
    "id": None,
    "title": "Advertise with Angelina411",
    "description": "Reach thousands of local readers daily. Contact us to advertise in our jail activity articles.",
    "target_url": "mailto:advertising@angelina411.com",
    "image_url": None,
    "advertiser_name": "Angelina411 News",
    "status": STATUS_ACTIVE,
    "start_date": None,
    "end_date": None,
    "priority": 0,
    "click_count": 0,
    "button_text": "Learn More",
    "is_fallback": True,
}

REQUIRED_FIELDS = ["businessName", "contactEmail", "targetUrl", "adDescription", "startDate", "endDate"]
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REVIEW_ACTIONS = {"approve": STATUS_APPROVED, "reject": STATUS_REJECTED}


class UploadedImage:
    """An uploaded advertisement image."""

    def __init__(self, filename: str, content_type: str, data: bytes):
        self.filename = filename
        self.content_type = content_type or ""
        self.data = data

    @property
    def size(self) -> int:
        return len(self.data)

    def data_url(self) -> str:
        return f"data:{self.content_type};base64,{base64.b64encode(self.data).decode('ascii')}"


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def normalize_advertisement(raw: Dict[str, Any], default_priority: int = 50) -> AdvertisementRecord:
    """
    Map a store row onto an advertisement record.
    """
    fields = raw.get("fields", {})
    image_url = None
    attachments = fields.get("Ad Image")
    if isinstance(attachments, list) and attachments and isinstance(attachments[0], dict):
        image_url = attachments[0].get("url")

    return {
        "id": raw.get("id"),
        "title": fields.get("Title") or "Advertisement",
        "description": fields.get("Ad Description") or "Local Business Advertisement",
        "target_url": fields.get("Target URL") or "",
        "image_url": image_url,
        "advertiser_name": fields.get("Advertiser Name") or "Local Business",
        "status": fields.get("Status") or STATUS_PENDING,
        "start_date": fields.get("Start Date"),
        "end_date": fields.get("End Date"),
        "priority": _to_int(fields.get("Priority"), default_priority),
        "click_count": _to_int(fields.get("Click Count"), 0),
        "button_text": fields.get("Button Text") or "Learn More",
        "is_fallback": False,
    }


def _in_range(ad: AdvertisementRecord, today: datetime.date) -> bool:
    try:
        start = parse_date(ad["start_date"]) if ad.get("start_date") else None
        end = parse_date(ad["end_date"]) if ad.get("end_date") else None
    except ValueError:
        return False
    return start is not None and end is not None and start <= today <= end


def select_active_advertisement(ads: List[AdvertisementRecord],
                                today: datetime.date) -> Optional[AdvertisementRecord]:
    """
    Pick the single advertisement to run today.

    Candidates have status Active and a date range containing today. The
    highest priority wins; ties go to the earliest start date.

    Args:
        ads: Candidate advertisements
        today: Current local date

    Returns:
        The winning advertisement or None
    """
    candidates = [ad for ad in ads if ad.get("status") == STATUS_ACTIVE and _in_range(ad, today)]
    if not candidates:
        return None
    candidates.sort(key=lambda ad: (-ad.get("priority", 0), parse_date(ad["start_date"]), ad.get("id") or ""))
    return candidates[0]


def validate_submission(form: Mapping[str, Any], image: Optional[UploadedImage],
                        today: datetime.date, max_image_bytes: int = 5 * 1024 * 1024) -> None:
    """
    Validate an advertisement submission, stopping at the first failing rule.

    Raises:
        AdValidationError: Naming the failing field
    """
    for field in REQUIRED_FIELDS:
        value = form.get(field)
        if value is None or not str(value).strip():
            raise AdValidationError(field, f"Missing required field: {field}")

    if image is None or not image.data:
        raise AdValidationError("adImage", "Advertisement image is required")
    if not image.content_type.startswith("image/"):
        raise AdValidationError("adImage", "Only image files (JPG, PNG, WebP) are allowed.")
    if image.size > max_image_bytes:
        raise AdValidationError(
            "adImage", f"File size too large. Maximum size is {max_image_bytes // (1024 * 1024)}MB."
        )

    try:
        start = parse_date(form["startDate"])
    except ValueError:
        raise AdValidationError("startDate", "Invalid start date")
    try:
        end = parse_date(form["endDate"])
    except ValueError:
        raise AdValidationError("endDate", "Invalid end date")

    if start < today:
        raise AdValidationError("startDate", "Start date cannot be in the past")
    if end <= start:
        raise AdValidationError("endDate", "End date must be after start date")

    if not EMAIL_REGEX.match(str(form["contactEmail"]).strip()):
        raise AdValidationError("contactEmail", "Invalid email address format")
    if not is_absolute_url(str(form["targetUrl"]).strip()):
        raise AdValidationError("targetUrl", "Invalid target URL format")


class AdvertisementService:
    """Read and write access to the advertisement table."""

    def __init__(self, client: Optional[AirtableClient], cfg: Config):
        self.client = client
        self.cfg = cfg
        self.table = cfg.ads.table_name

    @classmethod
    def from_config(cls, cfg: Config) -> "AdvertisementService":
        api_key = cfg.ads.api_key or cfg.airtable.api_key
        base_id = cfg.ads.base_id or cfg.airtable.base_id
        client = AirtableClient.for_ads(cfg) if api_key and base_id else None
        return cls(client, cfg)

    def _require_client(self) -> AirtableClient:
        if self.client is None:
            raise ConfigError("Advertisement store is not configured",
                              missing=["AIRTABLE_AD_API_KEY", "AIRTABLE_AD_BASE_ID"])
        return self.client

    def fetch_active_advertisement(self, today: datetime.date) -> Optional[AdvertisementRecord]:
        """
        Return the advertisement to run today.

        Never raises: store failures yield a copy of FALLBACK_ADVERTISEMENT.

        Args:
            today: Current local date

        Returns:
            Advertisement, fallback advertisement, or None when nothing qualifies
        """
        if self.client is None:
            logger.warning("No records-store credentials for advertisements")
            return None

        iso = today.isoformat()
        formula = (f"AND({{Status}} = '{STATUS_ACTIVE}', "
                   f"NOT(IS_AFTER({{Start Date}}, '{iso}')), "
                   f"NOT(IS_BEFORE({{End Date}}, '{iso}')))")
        try:
            rows = self.client.list_records(
                self.table,
                formula=formula,
                sort=[{"field": "Priority", "direction": "desc"},
                      {"field": "Start Date", "direction": "asc"}],
            )
            ads = [normalize_advertisement(row, self.cfg.ads.default_priority) for row in rows]
            ad = select_active_advertisement(ads, today)
        except Exception as e:
            logger.error(f"Error fetching advertisement: {e}")
            return dict(FALLBACK_ADVERTISEMENT)

        if ad is None:
            logger.info("No active advertisements found")
            return None

        logger.info(f"Active advertisement: {ad['title']} ({ad['advertiser_name']}, "
                    f"{ad['start_date']} to {ad['end_date']})")
        self.increment_click_count(ad["id"])
        return ad

    def increment_click_count(self, record_id: str) -> None:
        """Best-effort counter bump; failures are logged and ignored."""
        try:
            current = self.client.get_record(self.table, record_id)
            count = _to_int(current.get("fields", {}).get("Click Count"), 0)
            self.client.update_record(self.table, record_id, {"Click Count": count + 1})
        except Exception as e:
            logger.warning(f"Could not update advertisement view count: {e}")

    def submit_advertisement(self, form: Mapping[str, Any], image: Optional[UploadedImage],
                             today: datetime.date) -> Dict[str, Any]:
        """
        Validate and store a new submission in Pending Review.

        Args:
            form: Submitted form fields
            image: Uploaded image
            today: Current local date

        Returns:
            Submission summary

        Raises:
            AdValidationError: If the submission is invalid
            RecordsStoreError: If the record cannot be created
        """
        validate_submission(form, image, today, self.cfg.ads.max_image_bytes)
        client = self._require_client()

        business = str(form["businessName"]).strip()
        logger.info(f"Processing advertisement submission from: {business}")
        logger.info(f"Image file: {image.filename} ({image.size} bytes)")

        fields = {
            "Title": f"{business} - {today.month}/{today.day}/{today.year}",
            "Advertiser Name": business,
            "Email": str(form["contactEmail"]).strip(),
            "Phone": form.get("contactPhone") or "",
            "Business Website": form.get("businessWebsite") or "",
            "Target URL": str(form["targetUrl"]).strip(),
            "Ad Description": form["adDescription"],
            "Status": STATUS_PENDING,
            "Start Date": parse_date(form["startDate"]).isoformat(),
            "End Date": parse_date(form["endDate"]).isoformat(),
            "Submission Date": today.isoformat(),
            "Daily Budget": form.get("dailyBudget") or "",
            "Priority": self.cfg.ads.default_priority,
            "Click Count": 0,
            "Admin Notes": form.get("additionalNotes") or "",
        }
        created = client.create_record(self.table, fields)
        record_id = created["id"]
        logger.info(f"Advertisement record created: {record_id}")

        image_attached = self.attach_image(record_id, image)
        return {
            "success": True,
            "message": "Advertisement submitted successfully",
            "recordId": record_id,
            "status": "pending-review",
            "imageAttached": image_attached,
        }

    def attach_image(self, record_id: str, image: UploadedImage) -> bool:
        """Best-effort image attachment; the record stands without it."""
        try:
            self.client.update_record(self.table, record_id, {
                "Ad Image": [{"url": image.data_url(), "filename": image.filename}],
            })
            logger.info("Advertisement image uploaded")
            return True
        except Exception as e:
            logger.warning(f"Image upload failed, but record {record_id} was created: {e}")
            return False

    def review_advertisement(self, record_id: str, action: str, notes: Optional[str] = None) -> Dict[str, Any]:
        """
        Approve or reject a submission.

        Raises:
            AdValidationError: If the action is not "approve" or "reject"
        """
        status = REVIEW_ACTIONS.get(action)
        if status is None:
            raise AdValidationError("action", 'Invalid action. Must be "approve" or "reject"')

        client = self._require_client()
        client.update_record(self.table, record_id, {"Status": status, "Admin Notes": notes or ""})
        logger.info(f"Advertisement {record_id} marked {status}")
        return {"success": True, "status": status, "recordId": record_id}

    def list_pending_advertisements(self) -> List[Dict[str, Any]]:
        """List submissions awaiting review, oldest first."""
        client = self._require_client()
        rows = client.list_records(
            self.table,
            formula=f"{{Status}} = '{STATUS_PENDING}'",
            sort=[{"field": "Submission Date", "direction": "asc"}],
        )
        pending = []
        for row in rows:
            fields = row.get("fields", {})
            ad = normalize_advertisement(row, self.cfg.ads.default_priority)
            ad.update({
                "email": fields.get("Email"),
                "submission_date": fields.get("Submission Date"),
                "daily_budget": fields.get("Daily Budget"),
                "notes": fields.get("Admin Notes"),
            })
            pending.append(ad)
        return pending

    def get_advertisement_stats(self) -> Dict[str, int]:
        """Count advertisements per status."""
        client = self._require_client()
        rows = client.list_records(self.table)
        statuses = [row.get("fields", {}).get("Status") for row in rows]
        stats = {"total": len(rows)}
        for status, key in zip(AD_STATUSES, ("pending", "approved", "active", "rejected")):
            stats[key] = statuses.count(status)
        return stats
