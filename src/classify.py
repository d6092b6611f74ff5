"""Incident description classification for traffic pages."""

import re
from dataclasses import dataclass

from .models import ClassifiedFacts

ACTIVE_STATUS = "Currently Active"


@dataclass(frozen=True)
class DescriptionPatterns:
    """Compiled patterns for the labelled fields of a description."""

    location: re.Pattern = re.compile(r"Location : The (.+?) ")
    status: re.Pattern = re.compile(r"Status : (.+?)\.")
    roadworks: re.Pattern = re.compile(r"Reason : .*?Roadworks.*?\n")


DEFAULT_PATTERNS = DescriptionPatterns()


class DescriptionClassifier:
    """Extracts status, location and roadworks facts from descriptions.

    Matching is case-sensitive and the captured text is returned as-is.
    A missing field is reported as None, never as an error.
    """

    def __init__(self, patterns: DescriptionPatterns = DEFAULT_PATTERNS):
        self.patterns = patterns

    def status(self, description: str) -> str | None:
        match = self.patterns.status.search(description)
        return match.group(1) if match else None

    def location(self, description: str) -> str | None:
        match = self.patterns.location.search(description)
        return match.group(1) if match else None

    def is_roadworks(self, description: str) -> bool:
        """True if any Reason line mentions Roadworks before its newline."""
        return self.patterns.roadworks.search(description) is not None

    def classify(self, description: str) -> ClassifiedFacts:
        return ClassifiedFacts(
            status=self.status(description),
            location=self.location(description),
            is_roadworks=self.is_roadworks(description),
        )


def is_active_incident(facts: ClassifiedFacts) -> bool:
    """Check whether facts describe an active, non-roadworks incident on a road."""
    return (
        facts.status == ACTIVE_STATUS
        and not facts.is_roadworks
        and facts.location is not None
    )
