"""
Charge parsing for booking records.

The records store keeps charges, degrees and bond amounts as delimited text
columns. Entries are paired by position: charge *i* takes degree *i* and
bond *i*.
"""

from typing import List, Optional

from arrestpub.log import get_logger
from arrestpub.model import ChargeEntry, ChargeParseError

logger = get_logger(__name__)

DELIMITERS = (";", ",")


def detect_delimiter(text: Optional[str]) -> Optional[str]:
    """
    Detect the delimiter used by a charge-style field.

    Args:
        text: Raw field text

    Returns:
        ";" if present, otherwise "," if present, otherwise None
    """
    if not text:
        return None
    for delimiter in DELIMITERS:
        if delimiter in text:
            return delimiter
    return None


def split_field(text: Optional[str], delimiter: Optional[str] = None) -> List[str]:
    """
    Split a delimited field into trimmed, non-empty entries.

    Args:
        text: Raw field text
        delimiter: Delimiter to split on; detected when None

    Returns:
        List of entries
    """
    if not text or not text.strip():
        return []

    if delimiter is None:
        delimiter = detect_delimiter(text)

    parts = text.split(delimiter) if delimiter else [text]
    return [part.strip() for part in parts if part.strip()]


def parse_charges(offenses: Optional[str], degrees: Optional[str] = None,
                  bonds: Optional[str] = None, strict: bool = False) -> List[ChargeEntry]:
    """
    Parse raw offense, degree and bond text into charge entries.

    Args:
        offenses: Raw offenses text
        degrees: Raw degrees text
        bonds: Raw bond amounts text
        strict: Raise instead of warning when the fields use different delimiters

    Returns:
        Ordered list of charge entries
    """
    offense_delimiter = detect_delimiter(offenses)
    charges = split_field(offenses, offense_delimiter)
    if not charges:
        return []

    degree_list = _split_paired(degrees, offense_delimiter, "degrees", strict)
    bond_list = _split_paired(bonds, offense_delimiter, "bond amounts", strict)

    entries: List[ChargeEntry] = []
    for index, description in enumerate(charges):
        entries.append({
            "description": description,
            "degree": degree_list[index] if index < len(degree_list) else None,
            "bond_amount": bond_list[index] if index < len(bond_list) else None,
        })
    return entries


def _split_paired(text: Optional[str], offense_delimiter: Optional[str],
                  label: str, strict: bool) -> List[str]:
    delimiter = detect_delimiter(text)
    if delimiter and offense_delimiter and delimiter != offense_delimiter:
        message = (f"Offenses are split on {offense_delimiter!r} but {label} on "
                   f"{delimiter!r}; positional pairing may be misaligned")
        if strict:
            raise ChargeParseError(message)
        logger.warning(message)
    return split_field(text, delimiter)
