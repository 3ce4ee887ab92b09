"""
Daily posting pipeline: fetch, render and publish one article.
"""

import datetime
from typing import Any, Dict, Optional

from arrestpub.ads import AdvertisementService
from arrestpub.airtable import AirtableClient
from arrestpub.config import Config, require_credentials
from arrestpub.dates import local_today, parse_date
from arrestpub.fetcher import fetch_booking_records
from arrestpub.ghost import GhostAdminClient
from arrestpub.log import get_logger
from arrestpub.publisher import build_title, publish_document
from arrestpub.render import OUTPUT_FORMATS, render_document

logger = get_logger(__name__)


def resolve_target_date(cfg: Config, today: Optional[datetime.date] = None) -> datetime.date:
    """
    Determine which calendar day to report on.

    Args:
        cfg: Configuration; ``publication.article_date`` overrides the default
        today: Current local date, defaults to today in the publication timezone

    Returns:
        The override date, or the day before today
    """
    if cfg.publication.article_date:
        try:
            return parse_date(cfg.publication.article_date)
        except ValueError:
            raise ValueError(f"Invalid ARTICLE_DATE: {cfg.publication.article_date}")

    if today is None:
        today = local_today(cfg.publication.timezone)
    return today - datetime.timedelta(days=1)


def run_daily_post(cfg: Config, target_date=None, draft: bool = False,
                   output_format: Optional[str] = None,
                   records_client: Optional[AirtableClient] = None,
                   ghost_client: Optional[GhostAdminClient] = None,
                   ad_service: Optional[AdvertisementService] = None,
                   now: Optional[datetime.datetime] = None) -> Dict[str, Any]:
    """
    Run one daily post: fetch records, look up an advertisement, render and publish.

    The CMS is called exactly once per run.

    Args:
        cfg: Configuration
        target_date: Date to report on, defaults to resolve_target_date
        draft: Create a draft for manual review
        output_format: "html" or "lexical", defaults to ``ghost.output_format``
        records_client: Records-store client, built from configuration when omitted
        ghost_client: CMS client, built from configuration when omitted
        ad_service: Advertisement service, built from configuration when omitted
        now: Publication timestamp

    Returns:
        Summary of the run

    Raises:
        ConfigError: If credentials are missing
        RecordsStoreError: If records cannot be fetched
        PublishError: If the CMS rejects the post
    """
    require_credentials(cfg)

    output_format = output_format or cfg.ghost.output_format
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format: {output_format}")

    day = parse_date(target_date) if target_date else resolve_target_date(cfg)
    logger.info(f"Starting daily post for {day.isoformat()} ({output_format})")

    records_client = records_client or AirtableClient.for_records(cfg)
    records = fetch_booking_records(records_client, day, cfg)
    if not records:
        logger.info("No booking records found, publishing no-activity article")

    ad = None
    if cfg.ads.enabled:
        ad_service = ad_service or AdvertisementService.from_config(cfg)
        ad = ad_service.fetch_active_advertisement(local_today(cfg.publication.timezone, now))

    body = render_document(records, day, cfg, ad=ad, output_format=output_format)

    ghost_client = ghost_client or GhostAdminClient.from_config(cfg)
    result = publish_document(ghost_client, body, day, cfg, draft=draft, now=now)

    return {
        "status": result.status,
        "target_date": day.isoformat(),
        "record_count": len(records),
        "post_id": result.id,
        "url": result.url,
        "title": result.title or build_title(day, cfg),
        "advertisement": ad.get("title") if ad else None,
    }
