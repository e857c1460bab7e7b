"""Terminal rendering of an analysis result."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from policyscope.models.analysis import AnalysisResult, Risk, RiskLevel

RISK_LABELS = {
    RiskLevel.HIGH: "High risk",
    RiskLevel.MEDIUM: "Medium risk",
    RiskLevel.LOW: "Low risk",
    RiskLevel.UNKNOWN: "Unknown risk",
}

RISK_STYLES = {
    RiskLevel.HIGH: "bold red",
    RiskLevel.MEDIUM: "bold yellow",
    RiskLevel.LOW: "bold green",
    RiskLevel.UNKNOWN: "dim",
}

# (field, title, keyword used to pick related risks)
COLLECTION_CATEGORIES = [
    ("basic_info", "Basic information", "basic"),
    ("behavior_info", "Behavioral information", "behavior"),
    ("device_info", "Device information", "device"),
    ("third_party_login", "Third-party login", "third-party login"),
    ("account_info", "Account information", "account"),
    ("real_name_authentication", "Real-name authentication", "real-name"),
    ("content_interaction", "Content interaction", "content"),
]

USAGE_CATEGORIES = [
    ("account_services", "Account services"),
    ("content_services", "Content services"),
    ("customer_service", "Customer service"),
    ("marketing", "Marketing"),
    ("transaction_services", "Transaction services"),
]


def risk_label(level: RiskLevel) -> str:
    return RISK_LABELS[RiskLevel.from_label(level)]


def risk_style(level: RiskLevel) -> str:
    return RISK_STYLES[RiskLevel.from_label(level)]


def related_risks(risks: list[Risk], keyword: str) -> list[Risk]:
    """Risks whose description or reason mentions the keyword (case-insensitive)."""
    keyword = keyword.lower()
    return [
        risk
        for risk in risks
        if keyword in risk.description.lower() or keyword in risk.reason.lower()
    ]


def collection_sections(result: AnalysisResult) -> list[tuple[str, list[str], str]]:
    """Non-empty data collection categories as (title, items, keyword)."""
    sections = []
    for field, title, keyword in COLLECTION_CATEGORIES:
        items = getattr(result.data_collection, field)
        if items:
            sections.append((title, items, keyword))
    return sections


def disclosure_sections(result: AnalysisResult) -> list[tuple[str, list[str], str]]:
    """Non-empty sharing, rights and protection sections as (title, items, keyword)."""
    return [
        (title, items, keyword)
        for title, items, keyword in (
            ("Sharing parties", result.sharing_parties, "sharing"),
            ("Your rights", result.user_rights, "right"),
            ("Protection measures", result.protection_strategy, "protect"),
        )
        if items
    ]


def _risk_lines(risks: list[Risk]) -> str:
    return "\n".join(
        f"[{risk_style(risk.level)}]{risk_label(risk.level)}[/] {escape(risk.description)}"
        for risk in risks
    )


def _print_sections(console: Console, header: str, sections, risks: list[Risk]):
    if not sections:
        return
    console.print(f"\n[bold cyan]═══ {header} ═══[/bold cyan]")
    for title, items, keyword in sections:
        body = "\n".join(f"• {escape(item)}" for item in items)
        related = related_risks(risks, keyword)
        if related:
            body += f"\n\n[bold]Related risks:[/bold]\n{_risk_lines(related)}"
        console.print(Panel(body, title=title, border_style="cyan"))


def render_report(result: AnalysisResult, console: Console):
    """Print the full report."""
    console.print()
    console.print(
        Panel(
            f"[bold]Risks flagged:[/bold] {len(result.risks)}\n"
            f"[bold]Sharing parties:[/bold] {len(result.sharing_parties)}",
            title="Privacy Policy Report",
            border_style="blue",
        )
    )

    _print_sections(console, "Data Collection", collection_sections(result), result.risks)

    usage = result.usage_purpose
    table = Table(title="Usage Purposes", show_header=True)
    table.add_column("Category", style="bold")
    table.add_column("Purpose")
    for field, title in USAGE_CATEGORIES:
        value = getattr(usage, field)
        if value:
            table.add_row(title, escape(value))
    for purpose in usage.general:
        table.add_row("General", escape(purpose))
    if table.row_count:
        console.print()
        console.print(table)

    _print_sections(
        console, "Sharing, Rights and Protection", disclosure_sections(result), result.risks
    )

    console.print("\n[bold cyan]═══ Risk Assessment ═══[/bold cyan]")
    if not result.risks:
        console.print("[green]No privacy risks were flagged.[/green]")
        return

    risk_table = Table(show_header=True)
    risk_table.add_column("#", style="dim")
    risk_table.add_column("Level", justify="center")
    risk_table.add_column("Risk", max_width=50)
    risk_table.add_column("Reason", max_width=60)
    for i, risk in enumerate(result.risks, 1):
        risk_table.add_row(
            str(i),
            f"[{risk_style(risk.level)}]{risk_label(risk.level)}[/]",
            escape(risk.description),
            escape(risk.reason),
        )
    console.print(risk_table)
