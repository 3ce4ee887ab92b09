"""
Block model for rendered articles.

An article is an ordered list of blocks. Serializers in ``arrestpub.render``
turn the same list into flat markup or a node-tree document.
"""

from typing import List, Optional

from arrestpub.model import AdvertisementRecord, BookingRecord

DISCLAIMER = "disclaimer"
ATTRIBUTION = "attribution"
SPACER = "spacer"
NO_ACTIVITY = "no_activity"
ADVERTISEMENT = "advertisement"
RECORD_CARD = "record_card"
FOOTER = "footer"
HTML_EMBED = "html_embed"


class Block:
    """Base class for article blocks."""

    kind = ""

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.__dict__!r})"


class DisclaimerBlock(Block):
    """Fixed legal notice opening every article."""

    kind = DISCLAIMER

    def __init__(self, text: str, source_note: str, link_url: str, link_text: str):
        self.text = text
        self.source_note = source_note
        self.link_url = link_url
        self.link_text = link_text


class AttributionBlock(Block):
    """Source attribution line."""

    kind = ATTRIBUTION

    def __init__(self, text: str):
        self.text = text


class SpacerBlock(Block):
    kind = SPACER


class NoActivityBlock(Block):
    """Shown instead of record cards when no bookings were recorded."""

    kind = NO_ACTIVITY

    def __init__(self, text: str):
        self.text = text


class AdvertisementBlock(Block):
    """A single sponsored campaign card."""

    kind = ADVERTISEMENT

    def __init__(self, ad: AdvertisementRecord):
        self.ad = ad


class ShareableRecord:
    """Presentation view of one record, used for share links."""

    def __init__(self, anchor_id: str, name: str, age: str, primary_charge: str, booked: str):
        self.anchor_id = anchor_id
        self.name = name
        self.age = age
        self.primary_charge = primary_charge
        self.booked = booked

    @property
    def share_text(self) -> str:
        text = f"{self.name}, age {self.age} - {self.primary_charge}."
        if self.booked:
            text += f" Booked {self.booked}"
        return text

    def __eq__(self, other) -> bool:
        return isinstance(other, ShareableRecord) and self.__dict__ == other.__dict__


class RecordCardBlock(Block):
    """One booking record."""

    kind = RECORD_CARD

    def __init__(self, record: BookingRecord, share: Optional[ShareableRecord] = None):
        self.record = record
        self.share = share


class FooterBlock(Block):
    """Publisher attribution and topical tag chips."""

    kind = FOOTER

    def __init__(self, publisher_text: str, tags: List[str]):
        self.publisher_text = publisher_text
        self.tags = list(tags)


class HtmlEmbedBlock(Block):
    """Raw markup passed through unchanged."""

    kind = HTML_EMBED

    def __init__(self, html: str):
        self.html = html


class Document:
    """An ordered list of blocks for one target date."""

    def __init__(self, target_date: str, blocks: List[Block]):
        self.target_date = target_date
        self.blocks = list(blocks)

    def kinds(self) -> List[str]:
        return [block.kind for block in self.blocks]

    def records(self) -> List[BookingRecord]:
        return [block.record for block in self.blocks if isinstance(block, RecordCardBlock)]

    def __len__(self) -> int:
        return len(self.blocks)
