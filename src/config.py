"""Configuration management for traffic pages."""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_FEED_URL = "https://m.highwaysengland.co.uk/feeds/rss/AllEvents.xml"
DEFAULT_USER_AGENT = "traffic-pages/1.0 (+road incident pages)"
DEFAULT_TIMEOUT = 15.0
DEFAULT_OUTPUT_DIR = "traffic"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class FetchConfig:
    """Configuration for downloading the feed."""

    url: str = DEFAULT_FEED_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class OutputConfig:
    """Configuration for the generated pages."""

    directory: Path = Path(DEFAULT_OUTPUT_DIR)
    escape_descriptions: bool = False


class Config:
    """Main configuration manager."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.feed_url = os.getenv("TRAFFIC_FEED_URL", DEFAULT_FEED_URL)
        self.timeout = os.getenv("TRAFFIC_TIMEOUT", str(DEFAULT_TIMEOUT))
        self.user_agent = os.getenv("TRAFFIC_USER_AGENT", DEFAULT_USER_AGENT)
        self.output_dir = os.getenv("TRAFFIC_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
        self.escape_descriptions = os.getenv("TRAFFIC_ESCAPE_DESCRIPTIONS", "false")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

    def get_fetch_config(self) -> FetchConfig:
        """Get feed download configuration.

        Raises:
            ValueError: If the feed URL is empty or the timeout is not a
                positive number
        """
        url = self.feed_url.strip()
        if not url:
            raise ValueError("TRAFFIC_FEED_URL cannot be empty")

        try:
            timeout = float(self.timeout)
        except ValueError:
            raise ValueError(f"Invalid TRAFFIC_TIMEOUT: {self.timeout!r}")
        if timeout <= 0:
            raise ValueError(f"TRAFFIC_TIMEOUT must be positive: {self.timeout!r}")

        return FetchConfig(url=url, timeout=timeout, user_agent=self.user_agent)

    def get_output_config(self) -> OutputConfig:
        """Get page output configuration.

        Raises:
            ValueError: If the output directory is empty or the escape flag
                is not a recognised boolean
        """
        if not self.output_dir.strip():
            raise ValueError("TRAFFIC_OUTPUT_DIR cannot be empty")

        flag = self.escape_descriptions.strip().lower()
        if flag in TRUE_VALUES:
            escape = True
        elif flag in FALSE_VALUES:
            escape = False
        else:
            raise ValueError(
                f"Invalid TRAFFIC_ESCAPE_DESCRIPTIONS: {self.escape_descriptions!r}"
            )

        return OutputConfig(directory=Path(self.output_dir), escape_descriptions=escape)
