"""Workflow security check command."""

from collections.abc import Iterable

import click

from ghaudit.config_runtime import OUTPUT_FORMATS, load_runtime_config
from ghaudit.discovery import discover
from ghaudit.pipeline.renderer import render_json, render_text, summarize
from ghaudit.pipeline.runner import WorkflowAnalyzer
from ghaudit.pipeline.ui import err_console, print_warning
from ghaudit.policies.base import Severity
from ghaudit.utils.error_handler import handle_exceptions
from ghaudit.utils.exit_codes import ExitCodes
from ghaudit.utils.logging import logger


def split_ids(values: Iterable[str]) -> list[str]:
    """Flatten repeated and comma-separated policy identifier options."""
    ids = []
    for value in values:
        ids.extend(part.strip() for part in value.split(",") if part.strip())
    return ids


@click.command("check")
@handle_exceptions
@click.argument("paths", nargs=-1)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format (default from config: text)",
)
@click.option("--select", multiple=True, help="Only run these policies (repeat or comma-separate)")
@click.option("--disable", multiple=True, help="Skip these policies (repeat or comma-separate)")
@click.option(
    "--min-severity",
    type=click.Choice([severity.value for severity in Severity]),
    default=None,
    help="Hide findings below this severity",
)
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Threads per file for policy evaluation")
@click.option("--config", "config_path", default=None, help="Config file (default: .ghaudit/config.json)")
@click.option("--quiet-summary", is_flag=True, help="Do not print the summary line to stderr")
def check(paths, output_format, select, disable, min_severity, workers, config_path, quiet_summary):
    """Check workflow files for security problems.

    PATHS are workflow files or directories. A directory is searched for
    .github/workflows/*.yml and *.yaml; a .github/workflows directory itself
    is searched directly. Defaults to the current directory.

    Each finding is printed as:

    \b
      path:line:col: message (policy_id)

    A file that cannot be parsed or is not a valid workflow is reported on
    its own line and does not stop the other files from being checked.

    \b
    EXIT CODES:
      0  No findings
      1  Findings reported
      2  At least one file failed to load
      3  Usage error (unknown policy, missing path)

    \b
    SUPPRESSING FINDINGS:
      permissions: write-all  # ghaudit: ignore[no_all_permissions]
    """
    cfg = load_runtime_config(".", config_path)
    if output_format:
        cfg["output"]["format"] = output_format
    if min_severity:
        cfg["analysis"]["min_severity"] = min_severity
    if workers:
        cfg["analysis"]["workers"] = workers

    only = split_ids(select) or None
    try:
        analyzer = WorkflowAnalyzer.from_config(cfg, only=only, disabled=split_ids(disable))
    except KeyError as e:
        raise click.UsageError(f"Unknown policy: {e.args[0]}") from e
    except ValueError as e:
        raise click.UsageError(f"Invalid configuration: {e}") from e

    try:
        files = discover(paths or ["."])
    except FileNotFoundError as e:
        raise click.UsageError(str(e)) from e

    if not files:
        print_warning("No workflow files found")

    logger.info(
        "Checking {files} file(s) with {policies} policies",
        files=len(files),
        policies=len(analyzer.policies),
    )
    results = analyzer.check_files(files)

    if cfg["output"]["format"] == "json":
        click.echo(render_json(results))
    else:
        for line in render_text(results):
            click.echo(line)

    summary = summarize(results)
    if not quiet_summary and cfg["output"]["format"] == "text":
        style = "error" if summary["failed_files"] else "warning" if summary["findings"] else "success"
        err_console.print(
            f"[{style}]{summary['findings']} finding(s)[/{style}] in {summary['files']} file(s)"
            + (f", {summary['failed_files']} failed to load" if summary["failed_files"] else "")
            + (f", {summary['suppressed']} suppressed" if summary["suppressed"] else "")
        )

    exit_code = ExitCodes.for_results(summary["findings"], summary["failed_files"])
    logger.info("Exit {code}: {desc}", code=exit_code, desc=ExitCodes.get_description(exit_code))
    if exit_code != ExitCodes.SUCCESS:
        click.get_current_context().exit(exit_code)
