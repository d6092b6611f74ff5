"""Entry point for traffic pages."""

import sys
from datetime import UTC, datetime
from typing import Any

from .classify import DescriptionClassifier
from .config import Config
from .errors import TrafficError
from .grouping import RoadGrouper
from .logging_config import create_execution_logger, setup_structured_logging
from .render import PageEmitter
from .rss import FeedDecoder, FeedFetcher


def run(config: Config, execution_id: str) -> dict[str, Any]:
    """
    Run the fetch, decode, group and emit pipeline once.

    Args:
        config: Application configuration
        execution_id: Unique ID for logging context

    Returns:
        Metrics dictionary for the run

    Raises:
        TrafficError: On fetch, decode or output directory failure
        ValueError: On invalid configuration
    """
    logger = create_execution_logger("pipeline", execution_id)

    fetch_config = config.get_fetch_config()
    output_config = config.get_output_config()
    logger.info("Configuration initialized", feed_url=fetch_config.url)

    fetcher = FeedFetcher(fetch_config, execution_id=execution_id)
    decoder = FeedDecoder(execution_id=execution_id)
    grouper = RoadGrouper(
        DescriptionClassifier(),
        escape_descriptions=output_config.escape_descriptions,
        execution_id=execution_id,
    )
    emitter = PageEmitter(output_config.directory, execution_id=execution_id)

    document = fetcher.fetch()
    entries = decoder.decode(document)
    roads = grouper.group(entries)

    emitter.prepare_output_directory()
    report = emitter.emit(roads)

    return {
        "entries_decoded": len(entries),
        "entries_admitted": sum(len(paragraphs) for paragraphs in roads.values()),
        "roads": len(roads),
        "pages_written": len(report.written),
        "errors": list(report.failed.values()),
    }


def main() -> int:
    """Run once and return the process exit status."""
    config = Config()
    setup_structured_logging(config.log_level)

    execution_id = f"run_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)
    main_logger.log_execution_start()

    try:
        metrics = run(config, execution_id)
    except (TrafficError, ValueError) as e:
        error_msg = f"Critical error generating traffic pages: {e}"
        main_logger.error(error_msg, error=str(e), error_type=type(e).__name__)
        main_logger.log_execution_end(success=False, error=error_msg)
        return 1

    main_logger.log_metrics(metrics)
    main_logger.log_execution_end(success=True, metrics=metrics)
    return 0


if __name__ == "__main__":
    sys.exit(main())
