"""
Publication year extraction from free-form date strings.

Open Library's ``publish_date`` comes in several shapes ("29.03.2019",
"Jun 15, 2012", "1998-10", "2009", "c1975 reprint"). The structured formats
are tried in order and the first match wins; only when all of them fail is
the text scanned for a four digit year.
"""

import re
from datetime import datetime
from typing import Callable, List, Optional

from smartbooks.utils.logging import get_logger

logger = get_logger(__name__)

_YEAR_PATTERN = re.compile(r"(?<!\d)(\d{4})(?!\d)")


def _strptime_year(*formats: str) -> Callable[[str], Optional[int]]:
    def parse(text: str) -> Optional[int]:
        for fmt in formats:
            try:
                return datetime.strptime(text, fmt).year
            except ValueError:
                continue
        return None
    return parse


# Ordered from most to least specific. %b/%B match English month names
# under the default C locale.
DATE_PARSERS: List[Callable[[str], Optional[int]]] = [
    _strptime_year("%d.%m.%Y"),             # 29.03.2019
    _strptime_year("%b %d, %Y", "%B %d, %Y"),  # Jun 15, 2012
    _strptime_year("%Y-%m"),                # 1998-10
    _strptime_year("%Y"),                   # 2009
]


def scan_year(text: str) -> Optional[int]:
    """Return the first standalone run of four digits in ``text`` as a year."""
    match = _YEAR_PATTERN.search(text)
    if match:
        return int(match.group(1))
    return None


def resolve_year(text: Optional[str]) -> Optional[int]:
    """
    Extract a publication year from a date string.

    Args:
        text: Date text as delivered by the remote service

    Returns:
        The year, or None if the text is empty or contains no year
    """
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None

    for parse in DATE_PARSERS:
        year = parse(text)
        if year is not None:
            return year

    logger.warning("Date string has no standard format, scanning for a year", date=text)
    year = scan_year(text)
    if year is None:
        logger.warning("Could not extract a year from date string", date=text)
    return year
