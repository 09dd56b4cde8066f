"""
CLI utility functions.

Shared click group class and message helpers used by all command modules.
"""

import click
from typing import Optional


# Color definitions for consistent styling
COLORS = {
    "success": "green",
    "error": "red",
    "warning": "yellow",
    "info": "blue",
}


class AliasedGroup(click.Group):
    """
    Click group accepting unambiguous command prefixes.

    Underscores and hyphens are interchangeable (report_pa == report-pa).
    """

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        normalized_name = cmd_name.replace("_", "-")

        rv = click.Group.get_command(self, ctx, normalized_name)
        if rv is not None:
            return rv

        matches = [x for x in self.list_commands(ctx) if x.startswith(normalized_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        ctx.fail(f"Ambiguous command '{cmd_name}': could be {', '.join(sorted(matches))}")
        return None


def echo_success(message: str) -> None:
    """Print success message with green checkmark."""
    click.echo(click.style("✓ ", fg=COLORS["success"]) + message)


def echo_error(message: str) -> None:
    """Print error message with red X."""
    click.echo(click.style("✗ ", fg=COLORS["error"]) + message, err=True)


def echo_warning(message: str) -> None:
    """Print warning message with yellow exclamation."""
    click.echo(click.style("! ", fg=COLORS["warning"]) + message)


def echo_info(message: str) -> None:
    """Print info message with blue arrow."""
    click.echo(click.style("→ ", fg=COLORS["info"]) + message)


def format_number(n: int) -> str:
    """Format large numbers with thousand separators."""
    return f"{n:,}"


def parse_id_list(value: Optional[str]) -> list:
    """Split a comma-separated list of labels, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
