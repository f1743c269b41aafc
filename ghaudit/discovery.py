"""Locating workflow files from command-line paths."""

from collections.abc import Iterable
from pathlib import Path

from ghaudit.utils.constants import WORKFLOW_EXTENSIONS, WORKFLOWS_DIR
from ghaudit.utils.logging import logger


def is_workflow_file(path: Path) -> bool:
    """Check if ``path`` looks like a workflow file.

    Only YAML files are considered; the directory is not checked so that an
    explicitly named file is always analysed.
    """
    return path.suffix.lower() in WORKFLOW_EXTENSIONS


def is_workflows_dir(path: Path) -> bool:
    """True if ``path`` is a ``.github/workflows`` directory."""
    normalized = path.resolve().as_posix().lower()
    return normalized.endswith("/" + WORKFLOWS_DIR.as_posix())


def discover(paths: Iterable[str | Path]) -> list[Path]:
    """Expand files and directories into an ordered, de-duplicated file list.

    A file is taken as-is. A ``.github/workflows`` directory contributes the
    YAML files directly inside it; any other directory contributes the YAML
    files in its ``.github/workflows`` subdirectory.

    Raises:
        FileNotFoundError: If a path does not exist
    """
    found: list[Path] = []
    seen: set[Path] = set()

    for raw in paths:
        path = Path(raw)
        if not path.exists():
            raise FileNotFoundError(f"No such file or directory: {path}")

        if path.is_file():
            candidates = [path]
        else:
            workflows = path if is_workflows_dir(path) else path / WORKFLOWS_DIR
            if not workflows.is_dir():
                logger.info("No workflows directory under {path}", path=path)
                continue
            candidates = sorted(
                child for child in workflows.iterdir() if child.is_file() and is_workflow_file(child)
            )

        for candidate in candidates:
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            found.append(candidate)

    logger.debug("Discovered {count} workflow file(s)", count=len(found))
    return found
