"""Rich renderer for pay results.

Transforms SDK PayResult output into formatted Rich tables.
"""

from decimal import Decimal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from netpay.sdk.export import format_amount
from netpay.sdk.schemas import Hours, PayResult


def render_result(console: Console, result: PayResult, hours: Hours = None, warnings: list = None) -> None:
    """Render a pay result as Rich tables.

    Args:
        console: Rich Console instance
        result: Result from compute()
        hours: Optional hours to summarize above the result
        warnings: Optional notes shown first
    """
    for warning in warnings or []:
        console.print(Panel(
            f"[yellow]{warning}[/yellow]",
            title="Note",
            border_style="yellow"
        ))

    if hours is not None:
        _render_hours(console, hours)

    _render_result_table(console, result)


def _render_hours(console: Console, hours: Hours) -> None:
    """Render hours summary panel."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value", justify="right")

    table.add_row("Normal", _fmt_hours(hours.normal))
    table.add_row("Overtime 150%", _fmt_hours(hours.overtime150))
    table.add_row("Overtime 200%", _fmt_hours(hours.overtime200))
    table.add_row("Standby", _fmt_hours(hours.standby))

    console.print(Panel(table, title="Hours", border_style="dim"))


def _render_result_table(console: Console, result: PayResult) -> None:
    """Render main earnings/deductions/totals table."""
    totals = result.totals

    table = Table(title="Estimated Pay", box=box.ROUNDED)
    table.add_column("", style="bold", min_width=30)
    table.add_column("Amount", justify="right", min_width=12)

    table.add_row("[bold]EARNINGS[/bold]", "")
    for line in result.earnings_lines:
        table.add_row(f"  {line.label}", _fmt(line.amount))
    table.add_row("  [dim]Reimbursements[/dim]", f"[dim]{_fmt(totals.reimbursements_total)}[/dim]")
    table.add_row("Gross Pay", _fmt(totals.gross_pay))
    table.add_row("", "")

    table.add_row("Taxable Wage", _fmt(totals.taxable_wage), style="dim")
    table.add_row("Social Insurance Wage", _fmt(totals.social_insurance_wage), style="dim")
    table.add_row("Health Insurance Wage", _fmt(totals.health_insurance_wage), style="dim")
    table.add_row("", "")

    table.add_row("[bold]DEDUCTIONS[/bold]", "")
    for line in result.deduction_lines:
        table.add_row(f"  {line.label}", _fmt(line.amount))
    table.add_row("  [dim]Total Deductions[/dim]", f"[dim]{_fmt(totals.total_deductions)}[/dim]")
    table.add_row("", "")

    net_style = "bold green" if totals.net_pay >= 0 else "bold red"
    table.add_row(
        f"[{net_style}]NET PAY[/{net_style}]",
        f"[{net_style}]{_fmt(totals.net_pay)}[/{net_style}]",
    )
    table.add_row("Non-taxable Reimbursements", _fmt(totals.non_taxable_reimbursements), style="dim")

    console.print(table)


def _fmt(amount: Decimal) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"€{format_amount(amount)}"


def _fmt_hours(value: Decimal) -> str:
    return f"{value:.1f}"
