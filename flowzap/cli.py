import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table

from .errors import FlowZapError
from .graph_components.diff import DiffResult, diff
from .graph_components.graph import ExportedGraph
from .graph_components.parser import parse
from .graph_components.patch import apply_changes
from .service.playground_client import create_playground_url, validate_code
from .service.tools import handle_create_playground
from .syntax import SYNTAX_GUIDE

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="flowzap", description="Parse, diff and patch FlowZap diagram code"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    graph = sub.add_parser("graph", help="Export diagram code as a lane/node/edge graph")
    graph.add_argument("file", help="Diagram code file")
    graph.add_argument("--json", action="store_true", help="Print the graph as JSON")

    changes = sub.add_parser("diff", help="Compare two versions of diagram code")
    changes.add_argument("old", help="Original diagram code file")
    changes.add_argument("new", help="Updated diagram code file")
    changes.add_argument("--json", action="store_true", help="Print the diff as JSON")

    patch = sub.add_parser("apply", help="Apply patch operations to diagram code")
    patch.add_argument("file", help="Diagram code file")
    patch.add_argument("operations", help="JSON file holding a list of patch operations")
    patch.add_argument("-o", "--output", help="Write the patched code here instead of stdout")
    patch.add_argument(
        "--playground", action="store_true", help="Also create a shareable playground link"
    )

    validate = sub.add_parser("validate", help="Validate diagram code with the hosted service")
    validate.add_argument("file", help="Diagram code file")

    share = sub.add_parser("playground", help="Validate diagram code and create a playground link")
    share.add_argument("file", help="Diagram code file")

    guide = sub.add_parser("syntax", help="Show the diagram code syntax guide")
    guide.add_argument("--raw", action="store_true", help="Print the guide as plain Markdown")

    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def graph_tables(graph: ExportedGraph) -> List[Table]:
    lanes = Table(title="Lanes")
    for column in ("id", "label", "type"):
        lanes.add_column(column)
    for lane in graph.lanes:
        lanes.add_row(escape(lane.id), escape(lane.label), lane.type.value)

    nodes = Table(title="Nodes")
    for column in ("id", "lane", "shape", "kind", "label"):
        nodes.add_column(column)
    for node in graph.nodes:
        nodes.add_row(
            escape(node.id), escape(node.lane_id), node.shape.value, node.kind.value, escape(node.label)
        )

    edges = Table(title="Edges")
    for column in ("id", "from", "to", "handles", "label"):
        edges.add_column(column)
    for edge in graph.edges:
        edges.add_row(
            edge.id,
            escape(f"{edge.source_lane or '?'}.{edge.source}"),
            escape(f"{edge.target_lane or '?'}.{edge.target}"),
            escape(f"{edge.source_handle} -> {edge.target_handle}"),
            escape(edge.label or ""),
        )
    return [lanes, nodes, edges]


def diff_table(result: DiffResult) -> Table:
    table = Table(title="Changes")
    table.add_column("change")
    table.add_column("item")
    for node in result.nodes_added:
        table.add_row("[green]+ node[/green]", escape(f'{node.id} "{node.label}"'))
    for node in result.nodes_removed:
        table.add_row("[red]- node[/red]", escape(f'{node.id} "{node.label}"'))
    for update in result.nodes_updated:
        details = ", ".join(
            f"{name}: {change.old} -> {change.new}" for name, change in update.changes.items()
        )
        table.add_row("[yellow]~ node[/yellow]", escape(f"{update.id} ({details})"))
    for edge in result.edges_added:
        table.add_row("[green]+ edge[/green]", escape(f"{edge.source} -> {edge.target}"))
    for edge in result.edges_removed:
        table.add_row("[red]- edge[/red]", escape(f"{edge.source} -> {edge.target}"))
    for lane_id in result.lanes_added:
        table.add_row("[green]+ lane[/green]", escape(lane_id))
    for lane_id in result.lanes_removed:
        table.add_row("[red]- lane[/red]", escape(lane_id))
    return table


def _read(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _write_json(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


def _run_graph(args: argparse.Namespace) -> int:
    graph = parse(_read(args.file))
    if args.json:
        _write_json(graph.to_dict())
        return 0
    for table in graph_tables(graph):
        print(table)
    print(f"[bold]{graph.stats.cross_lane_edges}[/bold] cross-lane edge(s)")
    return 0


def _run_diff(args: argparse.Namespace) -> int:
    result = diff(_read(args.old), _read(args.new))
    if args.json:
        _write_json({"changes": result.to_dict(), "summary": result.summary})
        return 0
    print(escape(result.summary))
    if result.has_changes():
        print(diff_table(result))
    return 0


def _run_apply(args: argparse.Namespace) -> int:
    operations = json.loads(_read(args.operations))
    result = apply_changes(_read(args.file), operations)

    if args.output:
        Path(args.output).write_text(result.code, encoding="utf-8")
    else:
        sys.stdout.write(result.code + "\n")

    console = Console(stderr=True)
    for entry in result.applied:
        style = "green" if entry.applied else "yellow"
        console.print(f"[{style}]{escape(str(entry))}[/{style}]")

    if args.playground:
        shared = create_playground_url(result.code)
        if shared.url:
            console.print(f"Playground: {shared.url}")
        else:
            console.print(f"[red]Playground unavailable:[/red] {escape(shared.error or '')}")
    return 0


def _run_validate(args: argparse.Namespace) -> int:
    result = validate_code(_read(args.file))
    if result.valid:
        stats = result.stats or {}
        print(
            "[green]Valid[/green] - lanes: {lanes}, nodes: {nodes}, edges: {edges}".format(
                lanes=stats.get("lanes", 0), nodes=stats.get("nodes", 0), edges=stats.get("edges", 0)
            )
        )
        return 0
    print("[red]Validation failed[/red]")
    for issue in result.errors:
        print(f"- Line {issue.line}: {escape(issue.message)}")
    return 1


def _run_playground(args: argparse.Namespace) -> int:
    result = handle_create_playground(
        _read(args.file), validator=validate_code, playground=create_playground_url
    )
    if result["success"]:
        print(f"Playground: {result['url']}")
        return 0
    print(f"[red]{escape(result['error'])}[/red]")
    for issue in result.get("errors", []):
        print(f"- Line {issue['line']}: {escape(issue['message'])}")
    return 1


def _run_syntax(args: argparse.Namespace) -> int:
    if args.raw:
        sys.stdout.write(SYNTAX_GUIDE)
        return 0
    print(Markdown(SYNTAX_GUIDE))
    return 0


COMMANDS = {
    "graph": _run_graph,
    "diff": _run_diff,
    "apply": _run_apply,
    "validate": _run_validate,
    "playground": _run_playground,
    "syntax": _run_syntax,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    try:
        return COMMANDS[args.command](args)
    except (OSError, ValueError, FlowZapError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        Console(stderr=True).print(f"[red]Error:[/red] {escape(str(exc))}")
        return 1
