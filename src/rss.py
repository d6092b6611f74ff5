"""RSS feed download and decoding for traffic pages."""

import re
from datetime import datetime
from urllib.parse import urlparse
from xml.etree.ElementTree import Element, ParseError

import defusedxml.ElementTree as DefusedET
import requests
from dateutil import parser as date_parser
from dateutil import tz
from defusedxml import DefusedXmlException

from .config import FetchConfig
from .errors import DecodeError, DecodeErrorKind, FetchError
from .logging_config import create_execution_logger
from .models import Entry, FeedItem

# RFC 1123 date with the RFC 2822 allowances for 2-digit years and numeric zones.
# Zone names are UT, Z or 3-5 capitals so 12-hour markers never match.
PUB_DATE_PATTERN = re.compile(
    r"^(?P<datetime>(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun), "
    r"\d{1,2} (?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec) "
    r"(?P<year>\d{4}|\d{2}) \d{2}:\d{2}:\d{2}) "
    r"(?P<zone>[+-]\d{4}|UT|Z|[A-Z]{3,5})$"
)

# Offsets in seconds for the zone names defined by RFC 822
RFC822_ZONES = {
    "UT": 0,
    "UTC": 0,
    "GMT": 0,
    "Z": 0,
    "EST": -5 * 3600,
    "EDT": -4 * 3600,
    "CST": -6 * 3600,
    "CDT": -5 * 3600,
    "MST": -7 * 3600,
    "MDT": -6 * 3600,
    "PST": -8 * 3600,
    "PDT": -7 * 3600,
}


def _expand_year(year: str) -> str:
    """Apply the RFC 2822 rule: 00-49 are 20xx, 50-99 are 19xx."""
    if len(year) == 4:
        return year
    return f"{2000 + int(year) if int(year) < 50 else 1900 + int(year)}"


def _resolve_zone(zone: str) -> tz.tzoffset:
    if zone[0] in "+-":
        hours, minutes = int(zone[1:3]), int(zone[3:5])
        if hours > 23 or minutes > 59:
            raise ValueError(f"Invalid zone offset: {zone!r}")
        sign = -1 if zone[0] == "-" else 1
        return tz.tzoffset(None, sign * (hours * 3600 + minutes * 60))
    # Unknown abbreviations are kept at a zero offset
    return tz.tzoffset(zone, RFC822_ZONES.get(zone, 0))


def parse_pub_date(value: str) -> datetime:
    """Parse an RSS pubDate into a timezone-aware datetime.

    The zone is split off and resolved separately; only the date and
    24-hour time are handed to dateutil.

    Args:
        value: Raw pubDate text, surrounding whitespace allowed

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the text is not an RFC 1123 style date
    """
    text = value.strip()
    match = PUB_DATE_PATTERN.match(text)
    if not match:
        raise ValueError(f"pubDate is not an RFC 1123 date: {text!r}")

    local_text = match.group("datetime")
    year_start, year_end = match.span("year")
    local_text = (
        local_text[:year_start] + _expand_year(match.group("year")) + local_text[year_end:]
    )
    naive = date_parser.parse(local_text, ignoretz=True)
    return naive.replace(tzinfo=_resolve_zone(match.group("zone")))


def _element_text(parent: Element, tag: str) -> str:
    """Return the character data directly inside the first ``tag`` child."""
    element = parent.find(tag)
    if element is None:
        return ""
    pieces = [element.text or ""]
    pieces.extend(child.tail or "" for child in element)
    return "".join(pieces)


class FeedFetcher:
    """Downloads the feed document over HTTPS."""

    def __init__(self, config: FetchConfig, execution_id: str | None = None):
        """Initialize FeedFetcher with configuration.

        Args:
            config: Feed URL, timeout and user agent
            execution_id: Execution ID for logging context
        """
        self.config = config
        self.logger = create_execution_logger("feed_fetcher", execution_id)
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": config.user_agent})

    def fetch(self, url: str | None = None) -> bytes:
        """Download the complete feed body.

        Args:
            url: Feed URL, defaults to the configured one

        Returns:
            Raw response body

        Raises:
            FetchError: If the URL is not HTTPS or the download fails
        """
        feed_url = url or self.config.url

        parsed_url = urlparse(feed_url)
        if parsed_url.scheme != "https":
            error_msg = f"Feed URL must use HTTPS protocol: {feed_url}"
            self.logger.error(error_msg, feed_url=feed_url, scheme=parsed_url.scheme)
            raise FetchError(error_msg, url=feed_url)

        try:
            self.logger.info("Downloading feed content", feed_url=feed_url)
            response = self.session.get(feed_url, timeout=self.config.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(
                f"Failed to download feed {feed_url}: {e}",
                feed_url=feed_url,
                error=str(e),
            )
            raise FetchError(f"Failed to download feed {feed_url}: {e}", url=feed_url) from e

        self.logger.info(
            "Feed downloaded successfully",
            feed_url=feed_url,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response.content


class FeedDecoder:
    """Decodes an RSS document into entries, all or nothing."""

    def __init__(self, execution_id: str | None = None):
        self.logger = create_execution_logger("feed_decoder", execution_id)

    def parse_items(self, document: bytes) -> list[FeedItem]:
        """Parse the channel items without interpreting their dates.

        Raises:
            DecodeError: If the document is not well-formed or has no channel
        """
        try:
            root = DefusedET.fromstring(document)
        except (ParseError, DefusedXmlException) as e:
            raise DecodeError(
                DecodeErrorKind.MALFORMED_DOCUMENT, f"Feed is not well-formed XML: {e}"
            ) from e

        channels = root.findall("channel")
        if not channels:
            raise DecodeError(
                DecodeErrorKind.MALFORMED_DOCUMENT,
                f"Feed root <{root.tag}> has no <channel> element",
            )

        return [
            FeedItem(
                title=_element_text(item, "title"),
                pub_date=_element_text(item, "pubDate"),
                link=_element_text(item, "link"),
                description=_element_text(item, "description"),
            )
            for channel in channels
            for item in channel.findall("item")
        ]

    def decode(self, document: bytes) -> list[Entry]:
        """Decode a feed document into entries in feed order.

        Args:
            document: Raw feed bytes

        Returns:
            List of Entry objects

        Raises:
            DecodeError: If the document is malformed or any item's pubDate
                cannot be parsed
        """
        items = self.parse_items(document)

        entries = []
        for index, item in enumerate(items):
            try:
                timestamp = parse_pub_date(item.pub_date)
            except (ValueError, OverflowError) as e:
                self.logger.error(
                    f"Invalid pubDate in item {index}: {e}",
                    item_index=index,
                    pub_date=item.pub_date,
                )
                raise DecodeError(
                    DecodeErrorKind.INVALID_TIMESTAMP,
                    f"Invalid pubDate in item {index}: {item.pub_date!r}",
                    item_index=index,
                ) from e
            entries.append(
                Entry(
                    title=item.title,
                    link=item.link,
                    description=item.description,
                    timestamp=timestamp,
                )
            )

        self.logger.info("Decoded feed", entries_count=len(entries))
        return entries
