"""Centralized constants for ghaudit utils package."""

from pathlib import Path

# Working directory for config and logs, relative to the current directory
GHAUDIT_DIR = Path("./.ghaudit")

ERROR_LOG_FILE = GHAUDIT_DIR / "error.log"

# Where workflow files live inside a repository
WORKFLOWS_DIR = Path(".github") / "workflows"

WORKFLOW_EXTENSIONS = (".yml", ".yaml")
