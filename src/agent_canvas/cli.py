from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import Settings
from .errors import ReferentialInconsistency
from .logging_config import configure_logging
from .models import Graph
from .store import GraphStore
from .templates import DEFAULT_TEMPLATE, list_templates

console = Console()


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, message="agent-canvas %(version)s")
def main() -> None:
    """Turn agent workflow graphs into OpenAI Agents SDK programs."""


@main.command()
@click.option("--template", "template_id", type=str, default=None, help="Start from a built-in template.")
@click.option(
    "--graph",
    "graph_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file holding {nodes, edges}.",
)
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the program here.")
@click.option("--save", is_flag=True, default=False, help="Write to the configured output filename.")
@click.option("--strict", is_flag=True, default=False, help="Fail on edges that reference missing nodes.")
@click.option("--verbose", is_flag=True, default=False, help="Increase logging verbosity.")
def generate(
    template_id: Optional[str],
    graph_path: Optional[Path],
    output: Optional[Path],
    save: bool,
    strict: bool,
    verbose: bool,
) -> None:
    """Generate the program for a template or a graph file."""

    if template_id and graph_path:
        raise click.UsageError("--template and --graph are mutually exclusive")
    if save and output is not None:
        raise click.UsageError("--save and --output are mutually exclusive")

    settings = Settings()
    logger = configure_logging(verbose=verbose or settings.verbose, logger_name="agent_canvas.cli")
    store = GraphStore.from_settings(settings)

    if graph_path is not None:
        graph = Graph.model_validate_json(graph_path.read_text(encoding="utf-8"))
        store.replace(graph.nodes, graph.edges)
        logger.info("Loaded %s (%d nodes, %d edges)", graph_path, len(graph.nodes), len(graph.edges))
    else:
        store.load_template(template_id or DEFAULT_TEMPLATE)

    try:
        store.check_integrity(strict=strict)
    except ReferentialInconsistency as exc:
        raise click.ClickException(str(exc)) from exc

    code = store.generate_code()
    if save:
        output = Path(settings.output_filename)
    if output is None:
        click.echo(code, nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(code, encoding="utf-8")
    click.echo(click.style(f"Wrote {output}", fg="green"), err=True)


@main.command()
def templates() -> None:
    """List the built-in templates."""

    table = Table(title="Templates")
    table.add_column("Key")
    table.add_column("Description")
    for template in list_templates():
        table.add_row(template.key, template.description)
    console.print(table)


@main.command("export-template")
@click.argument("template_id")
def export_template(template_id: str) -> None:
    """Print a template graph as JSON so it can be edited and fed back to `generate --graph`."""

    store = GraphStore()
    store.load_template(template_id)
    click.echo(store.snapshot().model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":  # pragma: no cover
    main()
