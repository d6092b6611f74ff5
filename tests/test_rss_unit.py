"""Unit tests for feed download and decoding."""

from datetime import UTC, datetime, timedelta
from unittest.mock import Mock

import pytest
import requests

from src.config import FetchConfig
from src.errors import DecodeError, DecodeErrorKind, FetchError
from src.models import Entry
from src.rss import FeedDecoder, FeedFetcher, parse_pub_date

ACCIDENT = "Location : The A1 Status : Currently Active. Reason : Accident.\n"


def make_item(title="X", pub_date="Mon, 02 Jan 2006 15:04:05 GMT", link="", description=ACCIDENT):
    return (
        "<item>"
        f"<title>{title}</title>"
        f"<pubDate>{pub_date}</pubDate>"
        f"<link>{link}</link>"
        f"<description>{description}</description>"
        "</item>"
    )


def make_feed(*items: str) -> bytes:
    body = "".join(items)
    return f'<?xml version="1.0"?><rss version="2.0"><channel>{body}</channel></rss>'.encode()


class TestFeedDecoderUnit:
    """Unit tests for FeedDecoder."""

    def setup_method(self):
        self.decoder = FeedDecoder()

    def test_decode_single_item(self):
        """Test decoding a feed with one complete item."""
        entries = self.decoder.decode(
            make_feed(make_item(link="https://example.com/incident/1"))
        )

        assert entries == [
            Entry(
                title="X",
                link="https://example.com/incident/1",
                description=ACCIDENT,
                timestamp=datetime(2006, 1, 2, 15, 4, 5, tzinfo=UTC),
            )
        ]

    def test_description_is_not_modified(self):
        """Test that whitespace and newlines in descriptions are preserved."""
        description = "  Location : The M25 \nStatus : Currently Active.\n\n"
        entries = self.decoder.decode(make_feed(make_item(description=description)))

        assert entries[0].description == description

    def test_cdata_description(self):
        """Test that CDATA sections are read as plain text."""
        feed = make_feed(make_item(description="<![CDATA[Reason : <b>Debris</b>\n]]>"))

        entries = self.decoder.decode(feed)

        assert entries[0].description == "Reason : <b>Debris</b>\n"

    def test_missing_fields_default_to_empty(self):
        """Test that missing title, link and description are empty strings."""
        feed = make_feed("<item><pubDate>Tue, 03 Jan 2006 10:00:00 GMT</pubDate></item>")

        entries = self.decoder.decode(feed)

        assert len(entries) == 1
        assert entries[0].title == ""
        assert entries[0].link == ""
        assert entries[0].description == ""

    def test_feed_order_preserved(self):
        """Test that entries keep document order across items."""
        feed = make_feed(*(make_item(title=f"Item {i}") for i in range(5)))

        entries = self.decoder.decode(feed)

        assert [e.title for e in entries] == [f"Item {i}" for i in range(5)]

    def test_empty_channel(self):
        """Test that a channel without items decodes to no entries."""
        assert self.decoder.decode(make_feed()) == []

    def test_malformed_xml(self):
        """Test that a document that is not XML fails as malformed."""
        with pytest.raises(DecodeError) as exc_info:
            self.decoder.decode(b"<rss><channel><item></channel>")

        assert exc_info.value.kind == DecodeErrorKind.MALFORMED_DOCUMENT
        assert exc_info.value.item_index is None

    def test_empty_document(self):
        with pytest.raises(DecodeError) as exc_info:
            self.decoder.decode(b"")

        assert exc_info.value.kind == DecodeErrorKind.MALFORMED_DOCUMENT

    def test_missing_channel(self):
        """Test that a well-formed document without a channel is rejected."""
        with pytest.raises(DecodeError) as exc_info:
            self.decoder.decode(b"<feed><item><title>X</title></item></feed>")

        assert exc_info.value.kind == DecodeErrorKind.MALFORMED_DOCUMENT

    def test_entity_expansion_rejected(self):
        """Test that entity declarations are refused by the XML parser."""
        feed = (
            b'<?xml version="1.0"?><!DOCTYPE rss [<!ENTITY a "aaaa">]>'
            b"<rss><channel><item><title>&a;</title></item></channel></rss>"
        )

        with pytest.raises(DecodeError) as exc_info:
            self.decoder.decode(feed)

        assert exc_info.value.kind == DecodeErrorKind.MALFORMED_DOCUMENT

    def test_invalid_timestamp_aborts_whole_decode(self):
        """Test that one bad pubDate fails the decode with its index."""
        feed = make_feed(
            make_item(title="good"),
            make_item(title="also good"),
            make_item(title="bad", pub_date="yesterday afternoon"),
            make_item(title="never reached"),
        )

        with pytest.raises(DecodeError) as exc_info:
            self.decoder.decode(feed)

        assert exc_info.value.kind == DecodeErrorKind.INVALID_TIMESTAMP
        assert exc_info.value.item_index == 2

    def test_missing_pub_date_is_invalid(self):
        feed = make_feed("<item><title>No date</title></item>")

        with pytest.raises(DecodeError) as exc_info:
            self.decoder.decode(feed)

        assert exc_info.value.kind == DecodeErrorKind.INVALID_TIMESTAMP
        assert exc_info.value.item_index == 0

    def test_pub_date_whitespace_trimmed(self):
        feed = make_feed(make_item(pub_date="\n    Mon, 02 Jan 2006 15:04:05 GMT\n  "))

        entries = self.decoder.decode(feed)

        assert entries[0].timestamp == datetime(2006, 1, 2, 15, 4, 5, tzinfo=UTC)

    def test_twelve_hour_pub_date_is_invalid(self):
        """Test that a PM suffix fails the decode instead of shifting the clock."""
        feed = make_feed(make_item(pub_date="Mon, 02 Jan 2006 09:04:05 PM"))

        with pytest.raises(DecodeError) as exc_info:
            self.decoder.decode(feed)

        assert exc_info.value.kind == DecodeErrorKind.INVALID_TIMESTAMP
        assert exc_info.value.item_index == 0


class TestParsePubDateUnit:
    """Unit tests for pubDate parsing."""

    def test_numeric_offset(self):
        result = parse_pub_date("Tue, 10 Jun 2025 08:30:00 +0100")

        assert result.utcoffset() == timedelta(hours=1)
        assert result.astimezone(UTC) == datetime(2025, 6, 10, 7, 30, tzinfo=UTC)

    def test_negative_offset(self):
        result = parse_pub_date("Tue, 10 Jun 2025 08:30:00 -0500")

        assert result.utcoffset() == timedelta(hours=-5)

    def test_rfc822_zone_name(self):
        result = parse_pub_date("Mon, 02 Jan 2006 15:04:05 EST")

        assert result.utcoffset() == timedelta(hours=-5)

    def test_unknown_zone_name_has_zero_offset(self):
        result = parse_pub_date("Mon, 02 Jan 2006 15:04:05 BST")

        assert result.utcoffset() == timedelta(0)
        assert result.hour == 15

    def test_two_digit_year(self):
        result = parse_pub_date("Mon, 02 Jan 06 15:04:05 GMT")

        assert (result.year, result.month, result.day) == (2006, 1, 2)

    @pytest.mark.parametrize(
        "year, expected",
        [("00", 2000), ("49", 2049), ("50", 1950), ("75", 1975), ("99", 1999)],
    )
    def test_two_digit_year_century(self, year, expected):
        """Test that 00-49 are 20xx and 50-99 are 19xx."""
        result = parse_pub_date(f"Mon, 02 Jan {year} 15:04:05 GMT")

        assert result.year == expected

    @pytest.mark.parametrize("zone", ["PM", "AM", "A", "P"])
    def test_twelve_hour_markers_rejected(self, zone):
        """Test that a 12-hour marker in the zone slot is not a valid date."""
        with pytest.raises(ValueError):
            parse_pub_date(f"Mon, 02 Jan 2006 09:04:05 {zone}")

    def test_weekday_shaped_zone_kept_as_zone(self):
        result = parse_pub_date("Mon, 02 Jan 2006 09:04:05 MON")

        assert result.hour == 9
        assert result.tzname() == "MON"
        assert result.utcoffset() == timedelta(0)

    def test_zone_name_preserved(self):
        assert parse_pub_date("Mon, 02 Jan 2006 15:04:05 PDT").tzname() == "PDT"

    @pytest.mark.parametrize("zone", ["+2400", "-0060"])
    def test_out_of_range_offset_rejected(self, zone):
        with pytest.raises(ValueError):
            parse_pub_date(f"Mon, 02 Jan 2006 15:04:05 {zone}")

    def test_single_digit_day(self):
        result = parse_pub_date("Mon, 2 Jan 2006 15:04:05 GMT")

        assert result.day == 2

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "2006-01-02T15:04:05Z",
            "Monday, 02 Jan 2006 15:04:05 GMT",
            "Mon, 02 January 2006 15:04:05 GMT",
            "Mon, 02 Jan 2006 15:04 GMT",
            "Mon, 02 Jan 2006 15:04:05",
            "Mon, 02 Jan 206 15:04:05 GMT",
            "Mon, 31 Feb 2006 15:04:05 GMT",
            "Mon, 02 Jan 2006 25:04:05 GMT",
        ],
    )
    def test_rejects_non_rfc1123(self, value):
        with pytest.raises(ValueError):
            parse_pub_date(value)


class TestFeedFetcherUnit:
    """Unit tests for FeedFetcher."""

    def setup_method(self):
        self.config = FetchConfig(
            url="https://example.com/feed.xml", timeout=7, user_agent="test-agent/1.0"
        )
        self.fetcher = FeedFetcher(self.config)
        self.fetcher.session = Mock()

    def test_fetch_returns_body(self):
        response = Mock(status_code=200, content=b"<rss/>")
        self.fetcher.session.get.return_value = response

        assert self.fetcher.fetch() == b"<rss/>"
        self.fetcher.session.get.assert_called_once_with(
            "https://example.com/feed.xml", timeout=7
        )
        response.raise_for_status.assert_called_once()

    def test_user_agent_header(self):
        fetcher = FeedFetcher(self.config)

        assert fetcher.session.headers["User-Agent"] == "test-agent/1.0"

    def test_non_https_rejected(self):
        with pytest.raises(FetchError, match="HTTPS"):
            self.fetcher.fetch("http://example.com/feed.xml")

        self.fetcher.session.get.assert_not_called()

    def test_timeout_wrapped(self):
        self.fetcher.session.get.side_effect = requests.Timeout("timed out")

        with pytest.raises(FetchError) as exc_info:
            self.fetcher.fetch()

        assert exc_info.value.url == "https://example.com/feed.xml"
        assert isinstance(exc_info.value.__cause__, requests.Timeout)

    def test_http_error_wrapped(self):
        response = Mock(status_code=503, content=b"")
        response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        self.fetcher.session.get.return_value = response

        with pytest.raises(FetchError, match="503"):
            self.fetcher.fetch()
