"""Pipeline execution infrastructure."""
from .renderer import render_json, render_text
from .runner import FileResult, WorkflowAnalyzer, check_source
from .ui import console, err_console, print_warning

__all__ = [
    "FileResult", "WorkflowAnalyzer", "check_source", "render_json", "render_text",
    "console", "err_console", "print_warning",
]
