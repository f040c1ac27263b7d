"""Rich rendering of parse results."""

from __future__ import annotations

import io

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scriptingest.cli.formatters.base import OutputFormat, OutputFormatter
from scriptingest.models import ParsedScript, ParserResult

CONTENT_PREVIEW = 60


class ScriptFormatter(OutputFormatter[ParserResult]):
    """Summarize a ParserResult as rich tables."""

    def __init__(
        self, console: Console | None = None, show_elements: bool = False
    ) -> None:
        super().__init__(console)
        self.show_elements = show_elements

    def format(
        self,
        data: ParserResult,
        format_type: OutputFormat = OutputFormat.TABLE,  # noqa: ARG002
    ) -> str:
        """Render the result to plain text.

        Args:
            data: Parse result to render
            format_type: Output format type (ignored, always a table)

        Returns:
            Rendered text without ANSI escape codes
        """
        string_io = io.StringIO()
        self._render(Console(file=string_io, no_color=True, width=100), data)
        return string_io.getvalue()

    def print_result(self, result: ParserResult) -> None:
        self._render(self.console, result)

    def _render(self, console: Console, result: ParserResult) -> None:
        if not result.success or result.data is None:
            console.print(
                f"[red]Error ({result.error_type or 'ParseError'}):[/red] "
                f"{escape(result.error or '')}"
            )
        else:
            console.print(self._summary_table(result.data))
            if self.show_elements:
                console.print(self._elements_table(result.data))

        for warning in result.warnings:
            console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

    def _summary_table(self, script: ParsedScript) -> Table:
        metadata = script.metadata
        counts = metadata.element_counts

        table = Table(title=escape(script.title or metadata.original_filename))
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Format", script.format.value)
        table.add_row("Author", escape(script.author or "-"))
        table.add_row("Pages", str(script.page_count))
        table.add_row("Title page", "yes" if metadata.title_page_detected else "no")
        table.add_row("Scenes", str(counts.scene_headings))
        table.add_row("Dialogue", str(counts.dialogue_lines))
        table.add_row("Action", str(counts.action_blocks))
        table.add_row("Characters", escape(", ".join(script.characters)) or "-")
        table.add_row("Rendering", metadata.rendering_method)
        return table

    def _elements_table(self, script: ParsedScript) -> Table:
        table = Table(title="Elements")
        table.add_column("Page", justify="right", style="yellow")
        table.add_column("Type", style="cyan")
        table.add_column("Character", style="magenta")
        table.add_column("Content", no_wrap=False)

        for element in script.scenes:
            content = element.content
            if len(content) > CONTENT_PREVIEW:
                content = content[: CONTENT_PREVIEW - 3] + "..."
            table.add_row(
                str(element.page_number),
                element.type.value,
                escape(element.character or ""),
                escape(content),
            )
        return table
