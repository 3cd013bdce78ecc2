"""CLI entry point for forcegraph."""

import json
import logging
import sys

import click

from forcegraph import layout_graphs
from forcegraph.config import LayoutConfig
from forcegraph.parsers import parse


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["auto", "edges", "json"]),
    default="auto",
    help="Input format (default: detect)",
)
@click.option("--width", "-W", type=float, default=800.0, help="Width of the layout area")
@click.option("--height", "-H", type=float, default=600.0, help="Height of the layout area")
@click.option("--link-length", "-l", type=float, default=None, help="Ideal link length (default: from area)")
@click.option("--integration", "-i", type=str, default="verlet", help="Integration: euler or verlet")
@click.option("--approximation", "-a", type=str, default="none", help="Repulsion: barnes-hut or none")
@click.option("--max-iterations", "-n", type=int, default=1000, help="Iteration cap")
@click.option("--initial-positions", type=str, default="circle", help="Starting placement: circle or random")
@click.option("--seed", type=int, default=None, help="Seed for random placement")
@click.option("--json", "as_json", is_flag=True, help="Write positions as JSON")
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--verbose", "-v", is_flag=True, help="Log simulation progress to stderr")
def main(
    input: str | None,
    fmt: str,
    width: float,
    height: float,
    link_length: float | None,
    integration: str,
    approximation: str,
    max_iterations: int,
    initial_positions: str,
    seed: int | None,
    as_json: bool,
    output: str | None,
    verbose: bool,
) -> None:
    """Force-directed graph layout: print node positions for an edge list or JSON graph."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    try:
        graphs = parse(text, fmt)
    except ValueError as e:
        click.echo(f"parse error:\n{e}", err=True)
        sys.exit(1)

    if width <= 0 or height <= 0:
        click.echo("error: --width and --height must be positive", err=True)
        sys.exit(1)

    config = LayoutConfig(
        link_length=link_length,
        integration=integration,
        approximation=approximation,
        max_iterations=max_iterations,
        initial_positions=initial_positions,
        seed=seed,
    )
    layout = layout_graphs(graphs, width, height, config)
    positions = layout.positions()

    if as_json:
        rendered = json.dumps(
            {name: {key: list(pos) if pos else None for key, pos in nodes.items()} for name, nodes in positions.items()},
            indent=2,
        )
        rendered += "\n"
    else:
        rendered = _format_text(positions)

    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


def _format_text(positions: dict[str, dict[str, tuple[float, float] | None]]) -> str:
    prefix = len(positions) > 1
    lines: list[str] = []
    for name, nodes in positions.items():
        for key, pos in nodes.items():
            label = f"{name}:{key}" if prefix else key
            if pos is None:
                lines.append(f"{label}\t-\t-")
            else:
                lines.append(f"{label}\t{pos[0]:.3f}\t{pos[1]:.3f}")
    return "".join(line + "\n" for line in lines)


if __name__ == "__main__":
    main()
