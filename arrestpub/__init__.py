"""
Jail Activity Publisher.

Turns the day's booking records into a formatted article and publishes it to the CMS.
"""

__version__ = "0.1.0"

from arrestpub.model import BookingRecord, ChargeEntry, AdvertisementRecord, PublishResult
from arrestpub.config import Config, load_config
from arrestpub.charges import parse_charges
from arrestpub.fetcher import fetch_booking_records
from arrestpub.render import build_document, render_document
from arrestpub.publisher import publish_document
from arrestpub.ads import AdvertisementService
from arrestpub.pipeline import run_daily_post

__all__ = [
    "BookingRecord",
    "ChargeEntry",
    "AdvertisementRecord",
    "PublishResult",
    "Config",
    "load_config",
    "parse_charges",
    "fetch_booking_records",
    "build_document",
    "render_document",
    "publish_document",
    "AdvertisementService",
    "run_daily_post",
]
