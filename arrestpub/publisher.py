"""
Publisher for rendered articles.
"""

import datetime
from typing import Any, Dict, Optional, Union

from arrestpub.config import Config
from arrestpub.dates import format_long_date, parse_date, weekday_name
from arrestpub.ghost import GhostAdminClient
from arrestpub.log import get_logger
from arrestpub.model import PublishError, PublishResult
from arrestpub.render import DISCLAIMER_SOURCE_NOTE, lexical_json
from arrestpub.urls import slugify

logger = get_logger(__name__)

STATUS_PUBLISHED = "published"
STATUS_DRAFT = "draft"


def build_title(target_date, cfg: Config) -> str:
    """
    Build the post title from the date being reported on.

    Returns:
        "<brand> <subject> - <Weekday>"
    """
    pub = cfg.publication
    return f"{pub.brand} {pub.subject} - {weekday_name(target_date)}"


def build_slug(target_date, cfg: Config) -> str:
    day = parse_date(target_date)
    pub = cfg.publication
    return slugify(f"{pub.brand} {pub.subject} {weekday_name(day)} {day.month}-{day.day}-{day.year}")


def build_post_payload(body: Union[str, Dict[str, Any]], target_date, cfg: Config,
                       draft: bool = False, now: Optional[datetime.datetime] = None) -> Dict[str, Any]:
    """
    Assemble the CMS post fields for a rendered document.

    Args:
        body: Markup string or Lexical node tree
        target_date: Date being reported on
        cfg: Configuration
        draft: Create a draft instead of publishing
        now: Publication timestamp, defaults to the current UTC time

    Returns:
        Post fields
    """
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)
    pub = cfg.publication
    title = build_title(target_date, cfg)
    long_date = format_long_date(target_date)

    post: Dict[str, Any] = {
        "title": title,
        "slug": build_slug(target_date, cfg),
        "status": STATUS_DRAFT if draft else STATUS_PUBLISHED,
        "tags": [{"name": tag} for tag in pub.tags],
        "excerpt": (f"Daily jail booking activity for {long_date}. All persons listed are considered "
                    f"innocent until proven guilty in a court of law. {DISCLAIMER_SOURCE_NOTE}"),
        "meta_title": f"{title} | {pub.site_name}",
        "meta_description": (f"Daily arrest and booking activity from the {pub.source_agency} "
                             f"for {long_date}."),
        "og_title": title,
        "og_description": f"View arrest records and booking activity from {pub.brand}.",
        "twitter_title": title,
        "twitter_description": f"Daily jail activity report for {pub.brand}.",
    }
    if not draft:
        post["published_at"] = now.isoformat().replace("+00:00", "Z")
    if pub.feature_image:
        post["feature_image"] = pub.feature_image
    if cfg.ghost.author:
        post["authors"] = [cfg.ghost.author]

    if isinstance(body, str):
        post["html"] = body
    else:
        post["lexical"] = lexical_json(body)

    return post


def publish_document(client: GhostAdminClient, body: Union[str, Dict[str, Any]], target_date,
                     cfg: Config, draft: bool = False,
                     now: Optional[datetime.datetime] = None) -> PublishResult:
    """
    Submit a rendered document to the CMS.

    Args:
        client: CMS client
        body: Markup string or Lexical node tree
        target_date: Date being reported on
        cfg: Configuration
        draft: Create a draft for manual review instead of publishing
        now: Publication timestamp

    Returns:
        Identifier, URL and status of the created post

    Raises:
        PublishError: If the CMS rejects the post
    """
    post = build_post_payload(body, target_date, cfg, draft, now)
    logger.info(f"Creating {post['status']} post: {post['title']}")

    try:
        created = client.create_post(post)
    except PublishError as e:
        logger.error(f"Failed to create post: {e}")
        if e.payload:
            logger.error(f"CMS response: {e.payload}")
        raise

    result = PublishResult(
        id=created.get("id"),
        url=created.get("url"),
        status=created.get("status", post["status"]),
        title=created.get("title", post["title"]),
    )
    logger.info(f"Post {result.status}: {result.url}")
    return result
