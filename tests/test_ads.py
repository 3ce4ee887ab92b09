"""
Tests for the advertisement service.
"""

import datetime
from unittest.mock import MagicMock

import pytest

from arrestpub.ads import (
    FALLBACK_ADVERTISEMENT,
    AdvertisementService,
    UploadedImage,
    normalize_advertisement,
    select_active_advertisement,
    validate_submission,
)
from arrestpub.model import AdValidationError, ConfigError, RecordsStoreError

from conftest import ad_row

TODAY = datetime.date(2023, 12, 19)
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def image():
    return UploadedImage("banner.png", "image/png", PNG)


@pytest.fixture
def form():
    return {
        "businessName": "Farm Stand",
        "contactEmail": "owner@farmstand.example.com",
        "contactPhone": "936-555-0100",
        "targetUrl": "https://farmstand.example.com",
        "adDescription": "Fresh local produce every day.",
        "startDate": "2023-12-20",
        "endDate": "2023-12-31",
        "dailyBudget": "10",
        "additionalNotes": "Please run on weekdays",
    }


@pytest.fixture
def ads_client():
    client = MagicMock()
    client.create_record.return_value = {"id": "recNEWAD", "fields": {}}
    client.get_record.return_value = {"id": "recAD1", "fields": {"Click Count": 3}}
    return client


@pytest.fixture
def service(ads_client, sample_config):
    return AdvertisementService(ads_client, sample_config)


def test_normalize_advertisement():
    """Test mapping a store row."""
    ad = normalize_advertisement(ad_row("recAD1", **{"Ad Image": [{"url": "https://cdn.example.com/a.png"}]}))

    assert ad["id"] == "recAD1"
    assert ad["title"] == "Ad recAD1"
    assert ad["image_url"] == "https://cdn.example.com/a.png"
    assert ad["priority"] == 50
    assert ad["click_count"] == 3
    assert ad["is_fallback"] is False


def test_normalize_advertisement_defaults():
    """Test defaults for sparse rows."""
    ad = normalize_advertisement({"id": "recX", "fields": {}}, default_priority=20)

    assert ad["priority"] == 20
    assert ad["image_url"] is None
    assert ad["advertiser_name"] == "Local Business"


def test_select_highest_priority():
    """Test that the highest priority wins."""
    ads = [normalize_advertisement(row) for row in [
        ad_row("recLOW", priority=10),
        ad_row("recHIGH", priority=90),
        ad_row("recMID", priority=50),
    ]]

    assert select_active_advertisement(ads, TODAY)["id"] == "recHIGH"


def test_select_tie_breaks_on_earliest_start():
    """Test that equal priorities go to the earliest start date."""
    ads = [normalize_advertisement(row) for row in [
        ad_row("recLATE", start="2023-12-10"),
        ad_row("recEARLY", start="2023-12-01"),
    ]]

    assert select_active_advertisement(ads, TODAY)["id"] == "recEARLY"


def test_select_ignores_inactive_and_out_of_range():
    """Test eligibility rules."""
    ads = [normalize_advertisement(row) for row in [
        ad_row("recPENDING", status="Pending Review", priority=99),
        ad_row("recEXPIRED", end="2023-12-18", priority=99),
        ad_row("recFUTURE", start="2023-12-20", priority=99),
        ad_row("recUNDATED", start="", priority=99),
    ]]

    assert select_active_advertisement(ads, TODAY) is None

    ads.append(normalize_advertisement(ad_row("recLAST", start="2023-12-19", end="2023-12-19")))
    assert select_active_advertisement(ads, TODAY)["id"] == "recLAST"


def test_fetch_active_advertisement(service, ads_client):
    """Test fetching and counting today's advertisement."""
    ads_client.list_records.return_value = [ad_row("recAD1", priority=70), ad_row("recAD2", priority=30)]

    ad = service.fetch_active_advertisement(TODAY)

    assert ad["id"] == "recAD1"
    assert "{Status} = 'Active'" in ads_client.list_records.call_args[1]["formula"]
    ads_client.update_record.assert_called_once_with("Advertisements", "recAD1", {"Click Count": 4})


def test_fetch_active_advertisement_counter_failure_is_ignored(service, ads_client):
    """Test that a failed counter update does not affect the result."""
    ads_client.list_records.return_value = [ad_row("recAD1")]
    ads_client.update_record.side_effect = RecordsStoreError("read only", status_code=403)

    assert service.fetch_active_advertisement(TODAY)["id"] == "recAD1"


def test_fetch_active_advertisement_none(service, ads_client):
    """Test that no qualifying advertisement yields None."""
    ads_client.list_records.return_value = []

    assert service.fetch_active_advertisement(TODAY) is None
    ads_client.update_record.assert_not_called()


def test_fetch_active_advertisement_store_failure(service, ads_client):
    """Test that store failures yield the fallback advertisement."""
    ads_client.list_records.side_effect = RecordsStoreError("down", status_code=503)

    ad = service.fetch_active_advertisement(TODAY)

    assert ad == FALLBACK_ADVERTISEMENT
    assert ad["is_fallback"] is True
    assert ad["target_url"] == "mailto:advertising@angelina411.com"
    assert ad is not FALLBACK_ADVERTISEMENT


def test_fetch_active_advertisement_unconfigured(sample_config):
    """Test that a service without credentials returns None."""
    assert AdvertisementService.from_config(sample_config).fetch_active_advertisement(TODAY) is None


def test_validate_submission_accepts(form, image):
    """Test a valid submission."""
    validate_submission(form, image, TODAY)


@pytest.mark.parametrize("field", ["businessName", "contactEmail", "targetUrl", "adDescription",
                                   "startDate", "endDate"])
def test_validate_missing_field(form, image, field):
    """Test each required field."""
    form[field] = " "

    with pytest.raises(AdValidationError) as exc_info:
        validate_submission(form, image, TODAY)

    assert exc_info.value.field == field
    assert exc_info.value.message == f"Missing required field: {field}"


def test_validate_missing_image(form):
    """Test that the image is required."""
    with pytest.raises(AdValidationError, match="Advertisement image is required"):
        validate_submission(form, None, TODAY)


def test_validate_image_type(form):
    """Test that only images are accepted."""
    with pytest.raises(AdValidationError) as exc_info:
        validate_submission(form, UploadedImage("notes.pdf", "application/pdf", b"%PDF"), TODAY)
    assert exc_info.value.field == "adImage"


def test_validate_image_size(form):
    """Test the image size limit."""
    big = UploadedImage("big.png", "image/png", b"\x00" * 2048)

    with pytest.raises(AdValidationError, match="File size too large"):
        validate_submission(form, big, TODAY, max_image_bytes=1024)


def test_validate_start_in_past(form, image):
    """Test that campaigns cannot start in the past."""
    form["startDate"] = "2023-12-18"

    with pytest.raises(AdValidationError, match="Start date cannot be in the past"):
        validate_submission(form, image, TODAY)


@pytest.mark.parametrize("end", ["2023-12-20", "2023-12-19"])
def test_validate_end_after_start(form, image, end):
    """Test that the end date must follow the start date."""
    form["endDate"] = end

    with pytest.raises(AdValidationError, match="End date must be after start date"):
        validate_submission(form, image, TODAY)


def test_validate_email(form, image):
    """Test email format."""
    form["contactEmail"] = "owner at farmstand"

    with pytest.raises(AdValidationError, match="Invalid email address format"):
        validate_submission(form, image, TODAY)


def test_validate_target_url(form, image):
    """Test target URL format."""
    form["targetUrl"] = "farmstand.example.com"

    with pytest.raises(AdValidationError, match="Invalid target URL format"):
        validate_submission(form, image, TODAY)


def test_validation_order(form):
    """Test that the first failing rule is reported."""
    form["contactEmail"] = "bad"
    form["endDate"] = "2023-12-01"

    with pytest.raises(AdValidationError) as exc_info:
        validate_submission(form, None, TODAY)
    assert exc_info.value.field == "adImage"


def test_submit_advertisement(service, ads_client, form, image):
    """Test storing a submission for review."""
    result = service.submit_advertisement(form, image, TODAY)

    assert result == {
        "success": True,
        "message": "Advertisement submitted successfully",
        "recordId": "recNEWAD",
        "status": "pending-review",
        "imageAttached": True,
    }

    table, fields = ads_client.create_record.call_args[0]
    assert table == "Advertisements"
    assert fields["Title"] == "Farm Stand - 12/19/2023"
    assert fields["Status"] == "Pending Review"
    assert fields["Start Date"] == "2023-12-20"
    assert fields["End Date"] == "2023-12-31"
    assert fields["Submission Date"] == "2023-12-19"
    assert fields["Priority"] == 50
    assert fields["Click Count"] == 0
    assert fields["Admin Notes"] == "Please run on weekdays"

    record_id, image_fields = ads_client.update_record.call_args[0][1:]
    assert record_id == "recNEWAD"
    attachment = image_fields["Ad Image"][0]
    assert attachment["filename"] == "banner.png"
    assert attachment["url"].startswith("data:image/png;base64,")


def test_submit_advertisement_invalid_creates_nothing(service, ads_client, form, image):
    """Test that rejected submissions never reach the store."""
    form["endDate"] = "2023-12-20"

    with pytest.raises(AdValidationError):
        service.submit_advertisement(form, image, TODAY)

    ads_client.create_record.assert_not_called()


def test_submit_advertisement_image_failure(service, ads_client, form, image):
    """Test that a failed image attachment keeps the record."""
    ads_client.update_record.side_effect = RecordsStoreError("too large", status_code=422)

    result = service.submit_advertisement(form, image, TODAY)

    assert result["success"] is True
    assert result["recordId"] == "recNEWAD"
    assert result["imageAttached"] is False


def test_review_advertisement(service, ads_client):
    """Test approving and rejecting."""
    assert service.review_advertisement("recAD1", "approve", "Looks good")["status"] == "Approved"
    ads_client.update_record.assert_called_with("Advertisements", "recAD1",
                                                {"Status": "Approved", "Admin Notes": "Looks good"})

    assert service.review_advertisement("recAD1", "reject")["status"] == "Rejected"
    ads_client.update_record.assert_called_with("Advertisements", "recAD1",
                                                {"Status": "Rejected", "Admin Notes": ""})


def test_review_advertisement_invalid_action(service, ads_client):
    """Test that unknown actions are rejected."""
    with pytest.raises(AdValidationError, match='Must be "approve" or "reject"'):
        service.review_advertisement("recAD1", "publish")

    ads_client.update_record.assert_not_called()


def test_list_pending_advertisements(service, ads_client):
    """Test listing submissions awaiting review."""
    ads_client.list_records.return_value = [
        ad_row("recP1", status="Pending Review", **{"Email": "a@example.com", "Submission Date": "2023-12-18"}),
    ]

    pending = service.list_pending_advertisements()

    assert pending[0]["id"] == "recP1"
    assert pending[0]["email"] == "a@example.com"
    assert ads_client.list_records.call_args[1]["sort"] == [{"field": "Submission Date", "direction": "asc"}]


def test_get_advertisement_stats(service, ads_client):
    """Test counting advertisements per status."""
    ads_client.list_records.return_value = [
        ad_row("r1", status="Active"),
        ad_row("r2", status="Active"),
        ad_row("r3", status="Pending Review"),
        ad_row("r4", status="Rejected"),
    ]

    assert service.get_advertisement_stats() == {
        "total": 4,
        "pending": 1,
        "approved": 0,
        "active": 2,
        "rejected": 1,
    }


def test_unconfigured_service_raises(sample_config):
    """Test that write operations need a configured store."""
    service = AdvertisementService(None, sample_config)

    with pytest.raises(ConfigError):
        service.get_advertisement_stats()


def test_normalize_advertisement_non_numeric_counts():
    """Test that malformed numbers fall back to defaults."""
    ad = normalize_advertisement(ad_row("recBAD", priority="high", **{"Click Count": "n/a"}), default_priority=40)

    assert ad["priority"] == 40
    assert ad["click_count"] == 0


def test_list_pending_with_non_numeric_priority(service, ads_client):
    """Test that one malformed row does not break the pending list."""
    ads_client.list_records.return_value = [ad_row("recP1", status="Pending Review", priority="urgent")]

    pending = service.list_pending_advertisements()

    assert pending[0]["id"] == "recP1"
    assert pending[0]["priority"] == 50
