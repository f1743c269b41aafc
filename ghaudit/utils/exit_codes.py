"""Centralized exit codes for the ghaudit CLI."""


class ExitCodes:
    """Standard exit codes for ghaudit CLI commands."""

    SUCCESS = 0

    FINDINGS = 1

    LOAD_FAILURE = 2

    USAGE_ERROR = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - No issues found",
            cls.FINDINGS: "Policy findings reported",
            cls.LOAD_FAILURE: "At least one workflow could not be loaded or modeled",
            cls.USAGE_ERROR: "Invalid usage (unknown policy identifier or option)",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")

    @classmethod
    def for_results(cls, findings: int, failed_files: int) -> int:
        """Exit code for a check run; load failures outrank findings."""
        if failed_files:
            return cls.LOAD_FAILURE
        if findings:
            return cls.FINDINGS
        return cls.SUCCESS
