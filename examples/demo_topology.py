"""Demo script for the ArchGuard topology engine.

This demonstrates:
1. Graph Builder - building a frozen symbol graph
2. Invariant Analyzer - Betti numbers, coupling, solid score
3. Neighborhood Assembler - minimal task context
4. Virtual Apply - red-flagging competing candidate edits
5. Report Generator - comparing candidates

Usage:
    python examples/demo_topology.py
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from archguard.analysis import compute_edge_persistence
from archguard.layers import parse_layer_config
from archguard.logging import setup_logging
from archguard.models import Edge, EdgeKind, Edit, Symbol, SymbolKind
from archguard.validation import ReportFormat, ReportGenerator
from archguard.workspace import GraphWorkspace

console = Console()


LAYERS_YAML = """
layers:
  - name: domain
    patterns: ["app/domain/*"]
  - name: services
    patterns: ["app/services/*"]
    allowed_deps: [domain]
  - name: api
    patterns: ["app/api/*"]
    allowed_deps: [domain, services]
"""


def _symbol(symbol_id: str, kind: SymbolKind = SymbolKind.FUNCTION) -> Symbol:
    file_path, name = symbol_id.split("::")
    return Symbol(id=symbol_id, name=name, kind=kind, file_path=file_path)


USER = "app/domain/user.py::User"
REPO = "app/domain/user.py::UserRepository"
AUTH = "app/services/auth.py::AuthService"
TOKENS = "app/services/tokens.py::issue_token"
LOGIN = "app/api/routes.py::login"
AUDIT = "app/services/audit.py::record"

SYMBOLS = [
    _symbol(USER, SymbolKind.CLASS),
    _symbol(REPO, SymbolKind.CLASS),
    _symbol(AUTH, SymbolKind.CLASS),
    _symbol(TOKENS),
    _symbol(LOGIN),
    _symbol(AUDIT),
]

EDGES = [
    Edge(source_id=REPO, target_id=USER, kind=EdgeKind.REFERENCES, strength=0.9),
    Edge(source_id=AUTH, target_id=REPO, kind=EdgeKind.CALLS, strength=0.8),
    Edge(source_id=AUTH, target_id=TOKENS, kind=EdgeKind.CALLS, strength=0.7),
    Edge(source_id=LOGIN, target_id=AUTH, kind=EdgeKind.CALLS, strength=1.0),
    Edge(source_id=AUDIT, target_id=USER, kind=EdgeKind.REFERENCES, strength=0.2),
]


def demo_analysis(workspace: GraphWorkspace) -> None:
    """Show the invariants of the committed graph."""
    console.print("\n[bold cyan]═══ Invariant Analysis ═══[/bold cyan]\n")

    report = workspace.analyze()

    table = Table(title="Topological Health")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Symbols", str(report.node_count))
    table.add_row("Edges (undirected)", str(report.edge_count))
    table.add_row("Betti_0 (components)", str(report.betti_0))
    table.add_row("Betti_1 (cycles)", str(report.betti_1))
    table.add_row("Triangles", str(report.triangle_count))
    table.add_row("Coupling", f"{report.coupling_score:.3f}")
    table.add_row("Solid Score", f"{report.solid_score:.1f}/100")
    console.print(table)


def demo_assembly(workspace: GraphWorkspace) -> None:
    """Assemble the context an agent needs to change the login route."""
    console.print("\n[bold cyan]═══ Neighborhood Assembly ═══[/bold cyan]\n")

    mini = workspace.assemble([LOGIN], depth=2, strength_threshold=0.5, issue_id="AUTH-42")

    table = Table(title=f"MiniCodebase for {mini.seed_issue}")
    table.add_column("Symbol", style="cyan")
    table.add_column("Kind")
    table.add_column("Importance", justify="right")
    for entry in mini.symbols:
        table.add_row(entry.id, entry.kind.value, f"{entry.importance:.2f}")
    console.print(table)
    console.print(
        f"[dim]{len(mini.symbols)} of {mini.metadata.total_symbols_in_graph} symbols, "
        f"{len(mini.files)} files[/dim]"
    )
    console.print(Panel(mini.to_markdown(), title="Agent Context (markdown)"))


def demo_validation(workspace: GraphWorkspace) -> None:
    """Validate three competing candidate edits."""
    console.print("\n[bold cyan]═══ Virtual Apply ═══[/bold cyan]\n")

    candidates = {
        "domain-calls-service": [
            Edit(
                file_path="app/domain/user.py",
                new_edges=[Edge(source_id=USER, target_id=AUTH, kind=EdgeKind.CALLS)],
            )
        ],
        "new-audit-hook": [
            Edit(
                file_path="app/services/auth.py",
                new_edges=[Edge(source_id=AUTH, target_id=AUDIT, kind=EdgeKind.CALLS)],
            )
        ],
        "duplicate-login": [
            Edit(file_path="app/api/legacy.py", new_symbols=[_symbol(LOGIN)]),
        ],
    }

    results = workspace.validate_many(list(candidates.values()))

    table = Table(title="Candidate Verdicts")
    table.add_column("Candidate", style="cyan")
    table.add_column("State")
    table.add_column("Betti_1", justify="center")
    table.add_column("New Violations", justify="right")
    for name, result in zip(candidates, results):
        color = "green" if result.is_safe else "red"
        table.add_row(
            name,
            f"[{color}]{result.state.value}[/{color}]",
            f"{result.original_betti_1} → {result.new_betti_1}",
            str(len(result.layer_violations)),
        )
    console.print(table)

    report = ReportGenerator().generate(results, ReportFormat.TEXT, labels=list(candidates))
    console.print(Panel(report, title="Validation Report"))


def demo_persistence(workspace: GraphWorkspace) -> None:
    """Show which edge to cut once a cycle has been committed."""
    console.print("\n[bold cyan]═══ Edge Persistence ═══[/bold cyan]\n")

    generation = workspace.rebuild(
        SYMBOLS,
        EDGES + [Edge(source_id=USER, target_id=AUTH, kind=EdgeKind.CALLS, strength=0.4)],
    )
    console.print(f"[bold]Generation {generation.number}[/bold] committed with a cycle")

    for persistence in compute_edge_persistence(generation.graph):
        if persistence.cycle_id is None:
            continue
        console.print(
            f"  Cycle {persistence.cycle_id}: cut [yellow]{persistence.source}[/yellow] "
            f"→ [yellow]{persistence.target}[/yellow]"
        )


def run_demo() -> None:
    """Run the complete demo."""
    setup_logging("WARNING")

    console.print(Panel.fit(
        "[bold magenta]ArchGuard Topology Engine[/bold magenta]\n"
        "[cyan]Context assembly and pre-commit validation[/cyan]",
        border_style="bright_blue",
    ))

    workspace = GraphWorkspace(layer_config=parse_layer_config(LAYERS_YAML, "demo"))
    workspace.rebuild(SYMBOLS, EDGES)

    demo_analysis(workspace)
    demo_assembly(workspace)
    demo_validation(workspace)
    demo_persistence(workspace)

    console.print(Panel.fit(
        "[bold green]Demo Complete![/bold green]\n\n"
        "[dim]Run tests with: pytest tests/ -v[/dim]",
        border_style="green",
    ))


if __name__ == "__main__":
    run_demo()
