"""
DeployKit - UI Components & Branding
Standardized headers and UI elements
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape

LOGO = "deploykit"

# Color scheme
BRAND_COLOR = "cyan"


def show_header(
    title: str,
    subtitle: Optional[str] = None,
    details: Optional[dict] = None,
    console: Optional[Console] = None,
):
    """
    Display a standardized DeployKit command header.

    Args:
        title: Main title (e.g., "Deploy", "Cleanup")
        subtitle: Optional subtitle line
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)

    Example:
        show_header(
            title="Deploy",
            details={"Environment": "production", "Revision": "abc123"}
        )
    """
    if console is None:
        console = Console()

    prefix = f" [bold color(214)]{LOGO}[/bold color(214)] [dim]›[/dim]"

    console.print(f"{prefix} [bold white]{escape(title)}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{escape(subtitle)}[/dim]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [{BRAND_COLOR}]{escape(str(value))}[/{BRAND_COLOR}]")

    console.print()
