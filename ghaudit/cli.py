"""ghaudit CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - commands are imported after the cli group is defined

import click
from rich.table import Table

from ghaudit import __version__
from ghaudit.pipeline.ui import console
from ghaudit.utils.exit_codes import ExitCodes
from ghaudit.utils.logging import set_console_level


class VerboseGroup(click.Group):
    """Help output that groups commands by purpose."""

    COMMAND_CATEGORIES = {
        "ANALYSIS": {
            "title": "ANALYSIS",
            "description": "Check workflow files against the security policies",
            "commands": ["check"],
        },
        "POLICIES": {
            "title": "POLICIES",
            "description": "Browse the policy catalog",
            "commands": ["list", "show"],
        },
    }

    # click reports usage errors with exit code 2, which here means a load failure
    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = ExitCodes.USAGE_ERROR
            raise

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = ExitCodes.USAGE_ERROR
            raise

    def format_commands(self, ctx, formatter):
        """Suppress the default listing; format_help prints categories instead."""
        pass

    def format_help(self, ctx, formatter):
        super().format_help(ctx, formatter)

        registered = {
            name: cmd
            for name, cmd in self.commands.items()
            if not getattr(cmd, "hidden", False)
        }

        console.print()
        console.rule("[bold]COMMANDS[/bold]")

        for category in self.COMMAND_CATEGORIES.values():
            console.print(f"\n[bold cyan]{category['title']}[/bold cyan]")
            console.print(f"[dim]{category['description']}[/dim]")

            table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
            table.add_column("Command", style="policy", width=10)
            table.add_column("Description", style="white")

            for cmd_name in category["commands"]:
                if cmd_name not in registered:
                    continue
                first_line = (registered[cmd_name].help or "").split("\n")[0].strip()
                table.add_row(cmd_name, first_line.rstrip("."))

            console.print(table)

        console.print()
        console.print("For detailed options: [policy]ghaudit <command> --help[/policy]")


@click.group(cls=VerboseGroup)
@click.version_option(version=__version__, prog_name="ghaudit")
@click.help_option("-h", "--help")
@click.option("-v", "--verbose", count=True, help="Log more detail to stderr (-vv for debug)")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors")
def cli(verbose, quiet):
    """ghaudit - security linter for GitHub Actions workflows.

    Finds risky patterns in workflow files: overly broad GITHUB_TOKEN
    permissions, script injection through GitHub expressions in `run`
    steps, and third-party actions pinned to mutable refs.

    \b
    QUICK START:
      ghaudit check .                       # Check .github/workflows/
      ghaudit check ci.yml --format json    # Machine-readable output
      ghaudit list                          # Available policies
      ghaudit show permissions_set          # Policy documentation
    """
    if quiet:
        set_console_level("ERROR")
    elif verbose >= 2:
        set_console_level("DEBUG")
    elif verbose == 1:
        set_console_level("INFO")


from ghaudit.commands.check import check
from ghaudit.commands.list_policies import list_policies
from ghaudit.commands.show import show

cli.add_command(check)
cli.add_command(list_policies)
cli.add_command(show)


def main():
    cli()


if __name__ == "__main__":
    main()
