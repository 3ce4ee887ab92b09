"""
Document renderer.

Builds the block list for a day's bookings and serializes it either to flat
HTML markup or to a Lexical node-tree document. Rendering is pure: the same
records, date and advertisement always produce the same output.
"""

import datetime
import html
import json
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

from arrestpub.blocks import (
    AdvertisementBlock,
    AttributionBlock,
    Block,
    DisclaimerBlock,
    Document,
    FooterBlock,
    HtmlEmbedBlock,
    NoActivityBlock,
    RecordCardBlock,
    ShareableRecord,
    SpacerBlock,
)
from arrestpub.config import Config
from arrestpub.dates import format_moment, format_short_date, parse_date, weekday_name
from arrestpub.log import get_logger
from arrestpub.model import AdvertisementRecord, BookingRecord, ChargeEntry
from arrestpub.urls import is_absolute_url, is_valid_image_url, slugify

logger = get_logger(__name__)

# Legal text, reproduced verbatim
DISCLAIMER_TEXT = "All person(s) listed below are considered innocent until proven guilty in a court of law."
DISCLAIMER_SOURCE_NOTE = "Information obtained from public records."
DISCLAIMER_LINK_TEXT = "Click here to see full disclaimer."

NOT_PROVIDED = "Not provided"
STILL_IN_CUSTODY = "Still in custody"
NO_CHARGES = "No charges listed"
PHOTO_NOT_AVAILABLE = "Photo Not Available"

FORMAT_HTML = "html"
FORMAT_LEXICAL = "lexical"
OUTPUT_FORMATS = (FORMAT_HTML, FORMAT_LEXICAL)

DEMOGRAPHIC_FIELDS = [
    ("Age", "age"),
    ("Sex", "sex"),
    ("Race", "race"),
    ("Height", "height"),
    ("Weight", "weight"),
]


def _esc(value: Any) -> str:
    return html.escape(str(value), quote=True)


def _or_not_provided(value: Any) -> str:
    if value is None:
        return NOT_PROVIDED
    text = str(value).strip()
    return text or NOT_PROVIDED


def attribution_text(cfg: Config) -> str:
    return (f"Booking activity data, details and images provided by courtesy of the "
            f"{cfg.publication.source_agency}.")


def no_activity_text(target_date: datetime.date) -> str:
    return f"No booking activity recorded for {weekday_name(target_date)}, {format_short_date(target_date)}."


def charge_text(charge: ChargeEntry, show_bond: bool = False) -> str:
    """Display text for a charge: description, then degree and bond in parentheses."""
    text = charge["description"]
    if charge.get("degree"):
        text += f" ({charge['degree']})"
    if show_bond and charge.get("bond_amount"):
        text += f" (Bond: {charge['bond_amount']})"
    return text


def share_view(record: BookingRecord) -> ShareableRecord:
    """
    Build the shareable view of a record.

    The anchor id derives from the record id so re-rendering is stable.
    """
    charges = record.get("charges") or []
    primary = charges[0]["description"] if charges else NO_CHARGES
    return ShareableRecord(
        anchor_id=f"record-{slugify(record.get('id') or record.get('full_name', ''))}",
        name=record.get("full_name", ""),
        age=_or_not_provided(record.get("age")),
        primary_charge=primary,
        booked=format_moment(record.get("booking_date"), record.get("booking_time")) or "",
    )


def build_document(records: List[BookingRecord], target_date, cfg: Config,
                   ad: Optional[AdvertisementRecord] = None) -> Document:
    """
    Build the ordered block list for an article.

    Order: disclaimer, attribution, spacer, advertisement (at most once),
    one card per record in the given order or a single no-activity block,
    footer.

    Args:
        records: Booking records in fetch order
        target_date: Date being reported on
        cfg: Configuration
        ad: Optional advertisement

    Returns:
        Document
    """
    day = parse_date(target_date)
    pub = cfg.publication

    blocks: List[Block] = [
        DisclaimerBlock(DISCLAIMER_TEXT, DISCLAIMER_SOURCE_NOTE, pub.disclaimer_url, DISCLAIMER_LINK_TEXT),
        AttributionBlock(attribution_text(cfg)),
        SpacerBlock(),
    ]

    if ad:
        blocks.append(AdvertisementBlock(ad))

    if records:
        for record in records:
            share = share_view(record) if cfg.render.share_links else None
            blocks.append(RecordCardBlock(record, share))
    else:
        blocks.append(NoActivityBlock(no_activity_text(day)))

    blocks.append(FooterBlock(f"Published by {pub.publisher_name}", pub.footer_tags))

    return Document(day.isoformat(), blocks)


# --- Markup for individual blocks ---------------------------------------------------------------


def disclaimer_html(block: DisclaimerBlock) -> str:
    return (
        '<div class="kg-card kg-callout-card kg-callout-card-yellow arrest-disclaimer" '
        'style="background-color: #fff3cd; border: 1px solid #ffeaa7; border-radius: 8px; '
        'padding: 1rem; margin: 1.5rem 0; text-align: center;">'
        f'<p style="font-weight: bold; color: #856404; margin: 0;">{_esc(block.text)}</p>'
        f'<p style="color: #856404; margin: 0.5rem 0 0 0;">{_esc(block.source_note)} '
        f'<a href="{_esc(block.link_url)}" target="_blank" style="color: #007bff; '
        f'text-decoration: underline;">{_esc(block.link_text)}</a></p>'
        '</div>'
    )


def attribution_html(block: AttributionBlock) -> str:
    return (f'<p class="arrest-attribution" style="font-style: italic; color: #666; '
            f'text-align: center; margin: 1rem 0;"><em>{_esc(block.text)}</em></p>')


def no_activity_html(block: NoActivityBlock) -> str:
    return (
        '<div class="kg-card kg-callout-card kg-callout-card-blue no-activity" '
        'style="text-align: center; padding: 3rem; background-color: #f8f9fa; border-radius: 8px; color: #666;">'
        f'<p>{_esc(block.text)}</p>'
        '</div>'
    )


def mugshot_html(record: BookingRecord) -> str:
    """Image reference for a valid mugshot URL, the placeholder otherwise."""
    url = record.get("mugshot_url")
    name = record.get("full_name", "")
    if is_valid_image_url(url):
        return (f'<img src="{_esc(url)}" alt="Mugshot of {_esc(name)}" '
                'style="width: 150px; height: 180px; object-fit: cover; border-radius: 6px; border: 2px solid #ddd;">')
    return (
        '<div class="mugshot-placeholder" style="width: 150px; height: 180px; '
        'background: linear-gradient(135deg, #f8f9fa 0%, #e9ecef 100%); border-radius: 6px; '
        'border: 2px dashed #dee2e6; display: flex; flex-direction: column; align-items: center; '
        'justify-content: center; color: #6c757d; text-align: center; font-size: 11px; padding: 10px; '
        'box-sizing: border-box;">'
        '<div style="font-size: 24px; margin-bottom: 8px; opacity: 0.5;">&#128247;</div>'
        f'<div style="line-height: 1.3;">{PHOTO_NOT_AVAILABLE}</div>'
        '</div>'
    )


def charges_html(charges: List[ChargeEntry], show_bond: bool = False) -> str:
    """Charges as a list when there are several, inline otherwise."""
    if not charges:
        return f'<p class="charges"><strong>Charges:</strong> {NO_CHARGES}</p>'
    if len(charges) == 1:
        return f'<p class="charges"><strong>Charges:</strong> {_esc(charge_text(charges[0], show_bond))}</p>'

    items = "".join(f"<li>{_esc(charge_text(charge, show_bond))}</li>" for charge in charges)
    return (
        '<div class="charges" style="margin-top: 15px;">'
        '<p><strong>Charges:</strong></p>'
        f'<ul class="charges-list" style="margin: 8px 0; padding-left: 20px;">{items}</ul>'
        '</div>'
    )


def share_links_html(share: ShareableRecord, cfg: Config) -> str:
    page_url = f"{cfg.publication.site_url.rstrip('/')}/#{share.anchor_id}"
    url = quote(page_url, safe="")
    text = quote(f"{cfg.publication.brand} Jail Activity: {share.share_text}", safe="")
    subject = quote(f"{share.name} - {cfg.publication.brand} {cfg.publication.subject}", safe="")
    link_style = ("background: #666; color: white; padding: 4px 8px; border-radius: 3px; "
                  "font-size: 11px; text-decoration: none;")
    return (
        '<div class="social-sharing" style="display: flex; gap: 6px; justify-content: flex-end; margin-top: 10px;">'
        f'<a href="https://www.facebook.com/sharer/sharer.php?u={url}&amp;quote={text}" target="_blank" '
        f'style="{link_style}">Share</a>'
        f'<a href="https://twitter.com/intent/tweet?text={text}&amp;url={url}" target="_blank" '
        f'style="{link_style}">Tweet</a>'
        f'<a href="mailto:?subject={subject}&amp;body={url}" style="{link_style}">Email</a>'
        '</div>'
    )


def record_card_html(block: RecordCardBlock, cfg: Config) -> str:
    record = block.record
    anchor = f' id="{_esc(block.share.anchor_id)}"' if block.share else ""

    details = [f'<p><strong>Name:</strong> <span class="arrestee-name">{_esc(record.get("full_name", ""))}</span></p>']
    for label, key in DEMOGRAPHIC_FIELDS:
        details.append(f'<p><strong>{label}:</strong> <span class="arrestee-{key}">'
                       f'{_esc(_or_not_provided(record.get(key)))}</span></p>')
    booked = format_moment(record.get("booking_date"), record.get("booking_time"))
    details.append(f'<p><strong>Booked:</strong> <span class="booking-date">{_esc(booked)}</span></p>')
    released = format_moment(record.get("release_date"), record.get("release_time")) or STILL_IN_CUSTODY
    details.append(f'<p><strong>Released:</strong> <span class="release-date">{_esc(released)}</span></p>')
    if record.get("arresting_agency"):
        details.append(f'<p><strong>Arresting Agency:</strong> {_esc(record["arresting_agency"])}</p>')

    share = share_links_html(block.share, cfg) if block.share else ""

    return (
        f'<div class="arrestee-record"{anchor} style="display: flex; flex-wrap: wrap; gap: 20px; margin: 30px 0; '
        'padding: 20px; border: 1px solid #e1e1e1; border-radius: 8px; background-color: #fafafa;">'
        f'<div class="mugshot-container" style="flex-shrink: 0;">{mugshot_html(record)}</div>'
        '<div class="arrestee-details" style="flex: 1; min-width: 0;">'
        + "".join(details)
        + charges_html(record.get("charges") or [], cfg.render.show_bond_amounts)
        + share
        + '</div></div>'
    )


def advertisement_html(block: AdvertisementBlock) -> str:
    ad = block.ad
    title = ad.get("title") or "Advertisement"
    image_url = ad.get("image_url")
    if image_url and is_absolute_url(image_url) and image_url.lower().startswith(("http://", "https://")):
        image = (f'<img src="{_esc(image_url)}" alt="{_esc(title)}" '
                 'style="max-width: 150px; max-height: 150px; object-fit: contain; border-radius: 4px;">')
    else:
        image = ('<div style="width: 150px; height: 150px; background: linear-gradient(135deg, #007acc 0%, #0056b3 100%); '
                 'border-radius: 6px; display: flex; align-items: center; justify-content: center; color: white; '
                 'font-size: 11px;">Advertisement</div>')

    return (
        '<div class="advertisement-section" style="display: flex; flex-wrap: wrap; gap: 20px; margin: 30px 0; '
        'padding: 20px; border: 1px solid #e1e1e1; border-radius: 8px; background-color: #fafafa;">'
        f'<div class="ad-image-container">{image}</div>'
        '<div class="ad-content" style="flex: 1; min-width: 0;">'
        f'<p><strong>Advertisement:</strong> <span style="color: #007acc; font-weight: bold;">{_esc(title)}</span></p>'
        f'<p>{_esc(ad.get("description", ""))}</p>'
        f'<a href="{_esc(ad.get("target_url", ""))}" target="_blank" rel="sponsored noopener" '
        'style="background: #007acc; color: white; padding: 8px 16px; text-decoration: none; border-radius: 4px; '
        f'display: inline-block; font-size: 14px;">{_esc(ad.get("button_text") or "Learn More")}</a>'
        '<span style="float: right; background: #007acc; color: white; padding: 4px 8px; border-radius: 3px; '
        'font-size: 10px; opacity: 0.5;">AD</span>'
        '</div></div>'
    )


def footer_html(block: FooterBlock) -> str:
    chips = "".join(
        '<span class="tag-chip" style="background: #e9ecef; padding: 0.25rem 0.5rem; border-radius: 4px; '
        f'margin: 0 0.25rem; font-size: 0.8rem;">{_esc(tag)}</span>'
        for tag in block.tags
    )
    return (
        '<hr>'
        '<div class="article-footer" style="text-align: center; margin-top: 2rem; color: #888;">'
        f'<p><em>{_esc(block.publisher_text)}</em></p>'
        f'<p style="margin-top: 1rem;">{chips}</p>'
        '</div>'
    )


def block_html(block: Block, cfg: Config) -> str:
    """Render a single block to markup."""
    if isinstance(block, DisclaimerBlock):
        return disclaimer_html(block)
    if isinstance(block, AttributionBlock):
        return attribution_html(block)
    if isinstance(block, SpacerBlock):
        return ""
    if isinstance(block, NoActivityBlock):
        return no_activity_html(block)
    if isinstance(block, AdvertisementBlock):
        return advertisement_html(block)
    if isinstance(block, RecordCardBlock):
        return record_card_html(block, cfg)
    if isinstance(block, FooterBlock):
        return footer_html(block)
    if isinstance(block, HtmlEmbedBlock):
        return block.html
    raise ValueError(f"Unknown block kind: {block.kind}")


# --- Serializers --------------------------------------------------------------------------------


def to_html(document: Document, cfg: Config) -> str:
    """
    Serialize a document to flat markup.
    """
    parts = [block_html(block, cfg) for block in document.blocks]
    body = "\n".join(part for part in parts if part)
    return f'<div class="jail-activity-article">\n{body}\n</div>'


def _text_node(text: str, fmt: int = 0) -> Dict[str, Any]:
    return {
        "detail": 0,
        "format": fmt,
        "mode": "normal",
        "style": "",
        "text": text,
        "type": "text",
        "version": 1,
    }


def _paragraph(children: List[Dict[str, Any]], align: str = "") -> Dict[str, Any]:
    return {
        "children": children,
        "direction": "ltr",
        "format": align,
        "indent": 0,
        "type": "paragraph",
        "version": 1,
    }


def _html_card(markup: str) -> Dict[str, Any]:
    return {"type": "html", "version": 1, "html": markup}


LEXICAL_BOLD = 1
LEXICAL_ITALIC = 2


def block_lexical(block: Block, cfg: Config) -> Dict[str, Any]:
    """Render a single block to a Lexical node."""
    if isinstance(block, DisclaimerBlock):
        return {
            "type": "callout",
            "version": 1,
            "calloutEmoji": "⚠️",
            "calloutText": (f"{_esc(block.text)} {_esc(block.source_note)} "
                            f"<a href='{_esc(block.link_url)}' target='_blank'>{_esc(block.link_text)}</a>"),
            "backgroundColor": "yellow",
        }
    if isinstance(block, AttributionBlock):
        return _paragraph([_text_node(block.text, LEXICAL_ITALIC)], "center")
    if isinstance(block, SpacerBlock):
        return _paragraph([])
    if isinstance(block, NoActivityBlock):
        return _paragraph([_text_node(block.text, LEXICAL_BOLD)], "center")
    return _html_card(block_html(block, cfg))


def to_lexical(document: Document, cfg: Config) -> Dict[str, Any]:
    """
    Serialize a document to a Lexical node tree.
    """
    return {
        "root": {
            "children": [block_lexical(block, cfg) for block in document.blocks],
            "direction": "ltr",
            "format": "",
            "indent": 0,
            "type": "root",
            "version": 1,
        }
    }


def serialize(document: Document, cfg: Config, output_format: str = FORMAT_HTML) -> Union[str, Dict[str, Any]]:
    """Serialize a document in the requested output format."""
    if output_format == FORMAT_HTML:
        return to_html(document, cfg)
    if output_format == FORMAT_LEXICAL:
        return to_lexical(document, cfg)
    raise ValueError(f"Unsupported output format: {output_format}")


def render_document(records: List[BookingRecord], target_date, cfg: Config,
                    ad: Optional[AdvertisementRecord] = None,
                    output_format: str = FORMAT_HTML) -> Union[str, Dict[str, Any]]:
    """
    Render records for a date straight to markup or a node tree.

    Args:
        records: Booking records in fetch order
        target_date: Date being reported on
        cfg: Configuration
        ad: Optional advertisement
        output_format: "html" or "lexical"

    Returns:
        Markup string or Lexical document
    """
    document = build_document(records, target_date, cfg, ad)
    logger.debug(f"Rendering {len(document)} blocks as {output_format}")
    return serialize(document, cfg, output_format)


def lexical_json(tree: Dict[str, Any]) -> str:
    """Encode a node tree the way the CMS stores it."""
    return json.dumps(tree, ensure_ascii=False, separators=(",", ":"))
