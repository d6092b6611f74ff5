"""Data models for traffic pages."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class FeedItem:
    """Represents a single raw RSS item before date parsing."""

    title: str = ""
    pub_date: str = ""
    link: str = ""
    description: str = ""


@dataclass(frozen=True)
class Entry:
    """Represents a decoded feed item."""

    title: str
    link: str
    description: str
    timestamp: datetime


@dataclass(frozen=True)
class ClassifiedFacts:
    """Facts extracted from an incident description."""

    status: str | None
    location: str | None
    is_roadworks: bool


@dataclass(frozen=True)
class RoadPage:
    """View model for a single road page."""

    title: str
    paragraphs: tuple[str, ...]


@dataclass
class EmitReport:
    """Outcome of writing road pages."""

    written: list[Path] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
