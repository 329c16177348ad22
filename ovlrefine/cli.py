import functools
import logging
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from ovlrefine.alignment.aligner import create_aligner
from ovlrefine.config import Config
from ovlrefine.core.io import ReadStore, load_overlaps, write_overlaps
from ovlrefine.errors import ConfigurationError, CoordinateError, UnknownReadError
from ovlrefine.parallel.orchestrator import align_overlaps

app = typer.Typer(
    name="ovlrefine",
    help="Refine raw read overlaps into trimmed, normalized alignments.",
    add_completion=False,
    no_args_is_help=True
)


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level),
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@app.callback()
def callback():
    """Overlap refinement toolkit."""


@app.command()
def refine(
    reads: Annotated[Path, typer.Argument(help="Reads (FASTA/FASTQ, optionally gzipped)")],
    overlaps: Annotated[Path, typer.Argument(help="Overlaps in PAF format")],
    output: Annotated[Path, typer.Argument(help="Output PAF with cg:Z and ac:f tags")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="YAML configuration file")] = None,
    threads: Annotated[Optional[int], typer.Option("--threads", "-t", help="Worker threads")] = None,
    batch_size: Annotated[Optional[int], typer.Option(help="Overlaps per task")] = None,
    left_align: Annotated[bool, typer.Option("--left-align", help="Left-align indels")] = False,
    no_progress: Annotated[bool, typer.Option("--no-progress", help="Hide the progress bar")] = False,
    verbose: bool = False
):
    """Align every overlap and write the refined overlaps."""
    try:
        config = Config().load(
            str(config_file) if config_file else None,
            {
                "reads_file": str(reads),
                "overlaps_file": str(overlaps),
                "output_file": str(output),
                "threads": threads,
                "batch_size": batch_size,
                "left_align": True if left_align else None,
                "progress": False if no_progress else None,
                "log_level": "DEBUG" if verbose else None,
            },
        )
    except ConfigurationError as e:
        typer.echo(f"Configuration Error: {e}", err=True)
        raise typer.Exit(code=1)

    setup_logging(config.get("log_level"))

    try:
        read_store = ReadStore.from_file(config.get("reads_file"))
        overlap_list = load_overlaps(config.get("overlaps_file"), read_store)
        report = align_overlaps(
            overlap_list,
            read_store,
            aligner_factory=functools.partial(create_aligner, config.aligner_scoring()),
            num_workers=config.get("threads"),
            batch_size=config.get("batch_size"),
            left_align=config.get("left_align"),
            progress=config.get("progress"),
        )
    except (UnknownReadError, CoordinateError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    written = write_overlaps(config.get("output_file"), overlap_list, read_store)
    typer.echo(f"Refined {report.refined}/{report.total} overlaps "
               f"({len(report.failures)} failed); wrote {written} to {config.get('output_file')}")


def main():
    app()


if __name__ == "__main__":
    main()
