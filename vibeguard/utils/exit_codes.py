"""Centralized exit codes for the VibeGuard CLI."""


class ExitCodes:
    """Standard exit codes for VibeGuard CLI commands."""

    SUCCESS = 0

    WARNING_FINDINGS = 1
    ERROR_FINDINGS = 2

    TASK_INCOMPLETE = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - No findings at or above the failure threshold",
            cls.WARNING_FINDINGS: "Warning or info findings at the failure threshold",
            cls.ERROR_FINDINGS: "Error severity security findings detected",
            cls.TASK_INCOMPLETE: "Scan could not be completed",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")

