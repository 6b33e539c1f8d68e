#!/usr/bin/env python3
"""
Concept graph generation from a folder of notes.

Reads text/markdown files matching a glob, runs the concept linking pipeline against
the configured OpenAI-compatible endpoint and writes the linked notes plus the concept
index into a zip archive.

Usage:
    uv run python3 tools/ConceptGraphGeneration.py [input_glob] [output_zip] [use_case]

Examples:
    # Link all markdown notes with the default research-library profile
    uv run python3 tools/ConceptGraphGeneration.py "notes/*.md"

    # Meeting notes into a custom archive
    uv run python3 tools/ConceptGraphGeneration.py "meetings/**/*.md" out/meetings.zip meeting-notes
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import anyio
from rich.console import Console
from rich.table import Table

from com_blockether_conceptlinker.jobs import ArchivePackager
from com_blockether_conceptlinker.knowledge import (
    ConceptLinkerSettings,
    Document,
    DocumentLoader,
    ProcessedOutput,
    generate_concept_graph,
)
from com_blockether_conceptlinker.profiles import UseCaseProfileRegistry
from com_blockether_conceptlinker.utils.ConceptLinkerErrors import ConceptLinkerError

console = Console()


class ConceptGraphGeneration:
    """Runs the pipeline over files on disk and writes the archive."""

    def __init__(
        self,
        input_glob: Optional[str] = None,
        output_path: Optional[Path] = None,
        use_case: Optional[str] = None,
        log_level: int = logging.INFO,
    ):
        """
        Initialize the generation run.

        Args:
            input_glob: Glob pattern for input files. Defaults to "input/*.md"
            output_path: Archive to write. Defaults to "output/knowledge-graph.zip"
            use_case: Use-case key. Defaults to research-library
            log_level: Logging level. Defaults to INFO
        """
        self.input_glob = input_glob or "input/*.md"
        self.output_path = output_path or Path("output/knowledge-graph.zip")
        self.use_case = use_case or UseCaseProfileRegistry.DEFAULT_USE_CASE.value
        self.log_level = log_level
        self._setup_logging()

    def _setup_logging(self) -> None:
        logging.basicConfig(
            level=self.log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[logging.StreamHandler(sys.stdout)],
        )
        self.logger = logging.getLogger(__name__)

    def load_documents(self) -> List[Document]:
        """Read every file matching the input glob, named by its path relative to the glob root."""
        return DocumentLoader.load(self.input_glob)

    def print_summary(self, output: ProcessedOutput) -> None:
        table = Table(title=f"Concept graph ({self.use_case})")
        table.add_column("File", style="cyan")
        table.add_column("Concepts", justify="right")
        table.add_column("Extraction")
        table.add_column("Linking")
        table.add_column("Errors", style="red")

        for status in output.document_statuses:
            table.add_row(
                status.name,
                str(status.concept_count),
                status.extraction.value,
                status.linking.value,
                "; ".join(status.errors),
            )

        console.print(table)
        console.print(
            f"[green]✓ {output.metadata.total_concepts} concepts, {output.metadata.total_links} links "
            f"in {output.metadata.processing_time_ms}ms[/green]"
        )
        if output.partial:
            console.print("[yellow]Some files fell back to their original content or no concepts.[/yellow]")

    async def run(self) -> ProcessedOutput:
        """Load, process and package."""
        documents = self.load_documents()
        settings = ConceptLinkerSettings.from_environment()

        output = await generate_concept_graph(self.use_case, documents, settings=settings)

        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_bytes(ArchivePackager.package(output))
        console.print(f"[green]✓ Saved archive to {self.output_path}[/green]")

        self.print_summary(output)
        return output

    @classmethod
    async def from_cli(cls, args: Optional[List[str]] = None) -> None:
        """
        Create and run generation from command line arguments.

        Args:
            args: Command line arguments. If None, uses sys.argv
        """
        args = args or sys.argv[1:]

        input_glob = args[0] if len(args) > 0 else None
        output_path = Path(args[1]) if len(args) > 1 else None
        use_case = args[2] if len(args) > 2 else None

        generation = cls(input_glob=input_glob, output_path=output_path, use_case=use_case)
        await generation.run()


async def main() -> None:
    """Main entry point for command line execution."""
    try:
        await ConceptGraphGeneration.from_cli()
    except ConceptLinkerError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    anyio.run(main)
