"""Policy catalog listing command."""

import json

import click
from rich.markup import escape

from ghaudit.pipeline.ui import console
from ghaudit.policies.registry import default_registry
from ghaudit.utils.error_handler import handle_exceptions


@click.command("list")
@handle_exceptions
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text")
def list_policies(output_format):
    """List the available policies.

    Prints one policy per line, ordered by identifier, with its default
    severity and short description. Use `ghaudit show ID` for the full
    documentation of a policy.
    """
    descriptors = default_registry().descriptors()

    if output_format == "json":
        click.echo(json.dumps([metadata.to_dict() for metadata in descriptors], indent=2))
        return

    width = max((len(metadata.id) for metadata in descriptors), default=0)
    for metadata in descriptors:
        console.print(
            f"[policy]{metadata.id:<{width}}[/policy]  "
            f"[{metadata.severity.value}]{metadata.severity.value:<8}[/{metadata.severity.value}]  "
            f"{escape(metadata.short_description)}",
            soft_wrap=True,
        )
