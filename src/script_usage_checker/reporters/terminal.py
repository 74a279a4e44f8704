"""Terminal reporter using Rich library."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from script_usage_checker.models import ScriptKind, UsageResult, UsageVerdict


class TerminalReporter:
    """Generates terminal output using Rich."""

    def __init__(self, color: bool = True, console: Console | None = None) -> None:
        """Initialize terminal reporter.

        Args:
            color: If True, use colored output
            console: Console to print to (a new one if None)
        """
        self.console = console or Console(color_system="auto" if color else None)

    def print_summary_table(self, results: list[UsageResult]) -> None:
        """Print one row per script, unused scripts first.

        Args:
            results: Usage results
        """
        sorted_results = sorted(
            results,
            key=lambda r: (r.is_used, r.entity.name),
        )

        table = Table(
            title="📜 Script Usage",
            show_header=True,
            header_style="bold cyan",
        )

        table.add_column("Script", style="bold")
        table.add_column("Kind", justify="center")
        table.add_column("Attached To")
        table.add_column("Status", justify="center")
        table.add_column("Refs", justify="right")

        for result in sorted_results:
            status_color = self._get_status_color(result.verdict)
            name = escape(result.entity.name)
            if result.name_collision:
                name = f"{name} [yellow](duplicate name)[/yellow]"

            table.add_row(
                name,
                self._get_kind_label(result.entity.kind),
                escape(result.attachment_summary),
                f"[{status_color}]{result.verdict.value}[/{status_color}]",
                str(len(result.references)),
            )

        self.console.print(table)

    def print_detailed_report(self, result: UsageResult) -> None:
        """Print why a single script is considered used or unused.

        Args:
            result: Usage result
        """
        entity = result.entity
        self.console.print(f"\n[bold]{escape(entity.name)}[/bold] [dim]{escape(str(entity.file_path))}[/dim]")

        status_color = self._get_status_color(result.verdict)
        self.console.print(f"  Status: [{status_color}]{result.verdict.value}[/{status_color}]")
        self.console.print(f"  Attached to: {escape(result.attachment_summary)}")

        if result.has_lifecycle_hook:
            self.console.print("  Declares a lifecycle hook", style="cyan")

        for hit in result.references:
            self.console.print(f"  • {hit}", style="dim", markup=False)

        if result.name_collision:
            self.console.print(
                "  ⚠️  Another script has the same name; results may be shared",
                style="yellow",
            )

    def print_statistics(self, results: list[UsageResult]) -> None:
        """Print overall statistics.

        Args:
            results: Usage results
        """
        total = len(results)
        used = sum(1 for r in results if r.is_used)
        unused = total - used
        collisions = sum(1 for r in results if r.name_collision)

        stats = Text()
        stats.append("📊 Summary: ", style="bold")
        stats.append(f"{total} scripts checked | ")
        stats.append(f"🟢 {used} Used ", style="bold green")
        if unused > 0:
            stats.append(f"🔴 {unused} Unused ", style="bold red")
        if collisions > 0:
            stats.append(f"| ⚠️  {collisions} with duplicate names", style="bold yellow")

        self.console.print(Panel(stats, border_style="blue"))

    @staticmethod
    def _get_status_color(verdict: UsageVerdict) -> str:
        return "green" if verdict == UsageVerdict.USED else "red"

    @staticmethod
    def _get_kind_label(kind: ScriptKind) -> str:
        """Get label for a script kind.

        Args:
            kind: Script kind

        Returns:
            Label with icon
        """
        icons = {
            ScriptKind.BEHAVIOR: "🎮",
            ScriptKind.DATA_ASSET: "📦",
            ScriptKind.PLAIN_TYPE: "📄",
            ScriptKind.UNKNOWN: "❔",
        }

        return f"{icons.get(kind, '❔')} {kind.value}"
