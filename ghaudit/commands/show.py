"""Policy documentation command."""

import click
from rich.markdown import Markdown

from ghaudit.pipeline.ui import console
from ghaudit.policies.registry import default_registry
from ghaudit.utils.error_handler import handle_exceptions


@click.command("show")
@handle_exceptions
@click.argument("policy_id")
@click.option("--raw", is_flag=True, help="Print the Markdown source instead of rendering it")
def show(policy_id, raw):
    """Show the documentation of a policy.

    The documentation explains what the policy detects and why, with
    examples of flagged and accepted workflows.
    """
    policy = default_registry().find(policy_id)
    if policy is None:
        known = ", ".join(default_registry().ids())
        raise click.UsageError(f"Unknown policy: {policy_id} (available: {known})")

    if raw:
        click.echo(policy.metadata.long_description)
        return

    console.print(Markdown(policy.metadata.long_description))
