"""Grouping of active incidents by road for traffic pages."""

from markupsafe import escape

from .classify import DescriptionClassifier, is_active_incident
from .logging_config import create_execution_logger
from .models import Entry

LINE_BREAK = "<br>"


def format_description(description: str, escape_html: bool = False) -> str:
    """Convert a raw description into paragraph markup.

    Args:
        description: Raw description text from the feed
        escape_html: HTML-escape the text before inserting line breaks

    Returns:
        Description with every newline replaced by a line-break tag
    """
    if escape_html:
        description = str(escape(description))
    return description.replace("\n", LINE_BREAK)


class RoadGrouper:
    """Filters entries to active incidents and groups them by location."""

    def __init__(
        self,
        classifier: DescriptionClassifier | None = None,
        escape_descriptions: bool = False,
        execution_id: str | None = None,
    ):
        """Initialize the grouper.

        Args:
            classifier: Classifier applied to each description
            escape_descriptions: HTML-escape descriptions when formatting
            execution_id: Execution ID for logging context
        """
        self.classifier = classifier or DescriptionClassifier()
        self.escape_descriptions = escape_descriptions
        self.logger = create_execution_logger("road_grouper", execution_id)

    def group(self, entries: list[Entry]) -> dict[str, list[str]]:
        """Group active incidents by road.

        Keys appear in order of first occurrence and each list keeps feed
        order. Entries that are inactive, roadworks or have no location are
        dropped.

        Args:
            entries: Decoded entries in feed order

        Returns:
            Mapping of location to formatted descriptions
        """
        roads: dict[str, list[str]] = {}

        for index, entry in enumerate(entries):
            facts = self.classifier.classify(entry.description)
            if not is_active_incident(facts):
                self.logger.debug(
                    f"Skipping entry {index}: {entry.title}",
                    item_index=index,
                    status=facts.status,
                    location=facts.location,
                    is_roadworks=facts.is_roadworks,
                )
                continue

            roads.setdefault(facts.location, []).append(
                format_description(entry.description, self.escape_descriptions)
            )

        self.logger.info(
            f"Grouped {sum(len(v) for v in roads.values())} incidents into {len(roads)} roads",
            entries_count=len(entries),
            roads_count=len(roads),
        )
        return roads
