"""HTML page output for traffic pages."""

import shutil
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape
from markupsafe import Markup

from .errors import EmitError, OutputDirectoryError
from .logging_config import create_execution_logger
from .models import EmitReport, RoadPage

TEMPLATE_DIR = Path(__file__).parent / "templates"
ROAD_TEMPLATE = "road.html"

# Characters that would let a location escape the output directory
UNSAFE_FILENAME_CHARS = ("/", "\\", "\0")


def page_filename(location: str) -> str:
    """Return the file name for a road page.

    The location is used verbatim. Locations that are not a single safe
    path component are rejected rather than rewritten, so two roads can
    never collide on one file.

    Raises:
        EmitError: If the location is empty, a dot name, or contains a path
            separator or NUL
    """
    if location in ("", ".", "..") or any(c in location for c in UNSAFE_FILENAME_CHARS):
        raise EmitError(f"Location is not a safe file name: {location!r}", location)
    return f"{location}.html"


class PageEmitter:
    """Writes one HTML page per road into the output directory."""

    def __init__(self, output_dir: Path, execution_id: str | None = None):
        """Initialize the page emitter.

        Args:
            output_dir: Directory that receives the pages, replaced on each run
            execution_id: Execution ID for logging context
        """
        self.output_dir = Path(output_dir)
        self.logger = create_execution_logger("page_emitter", execution_id)
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def prepare_output_directory(self) -> None:
        """Remove any previous output and recreate an empty directory.

        Raises:
            OutputDirectoryError: If the directory cannot be removed or created
        """
        try:
            if self.output_dir.exists():
                shutil.rmtree(self.output_dir)
            self.output_dir.mkdir(parents=True)
        except OSError as e:
            self.logger.error(
                f"Failed to reset output directory {self.output_dir}: {e}",
                error=str(e),
            )
            raise OutputDirectoryError(
                f"Failed to reset output directory {self.output_dir}: {e}"
            ) from e

        self.logger.info("Output directory ready", output_dir=str(self.output_dir))

    def render_page(self, page: RoadPage) -> str:
        """Render a road page.

        The title is escaped by the template; paragraphs are inserted as
        already formatted markup.
        """
        template = self.env.get_template(ROAD_TEMPLATE)
        return template.render(
            title=page.title,
            paragraphs=[Markup(paragraph) for paragraph in page.paragraphs],
        )

    def write_page(self, page: RoadPage) -> Path:
        """Render and atomically write a single road page.

        Raises:
            EmitError: If the name is unsafe or rendering or writing fails;
                no file is left behind for the page
        """
        path = self.output_dir / page_filename(page.title)

        try:
            content = self.render_page(page)
        except TemplateError as e:
            raise EmitError(f"Failed to render page for {page.title!r}: {e}", page.title) from e

        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            temp_path.write_text(content, encoding="utf-8")
            temp_path.replace(path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise EmitError(f"Failed to write page for {page.title!r}: {e}", page.title) from e

        return path

    def emit(self, roads: dict[str, list[str]]) -> EmitReport:
        """Write a page for every road, skipping roads that fail.

        Args:
            roads: Mapping of location to formatted descriptions

        Returns:
            EmitReport listing written paths and failed locations
        """
        report = EmitReport()

        for location, paragraphs in roads.items():
            page = RoadPage(title=location, paragraphs=tuple(paragraphs))
            try:
                path = self.write_page(page)
            except EmitError as e:
                self.logger.error(str(e), location=location)
                report.failed[location] = str(e)
                continue

            report.written.append(path)
            self.logger.log_page_written(location, len(paragraphs))

        self.logger.info(
            f"Wrote {len(report.written)} pages, {len(report.failed)} failed",
            pages_written=len(report.written),
            pages_failed=len(report.failed),
        )
        return report
