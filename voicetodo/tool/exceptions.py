"""
Tool-related exceptions.

Expected tool-call outcomes (denial, failed execution) are reported as
ToolCallOutcome values; these exceptions cover tool implementations and the
permission infrastructure.
"""


class ToolError(Exception):
    """Base exception for all tool-related errors."""

    pass


class ToolExecutionError(ToolError):
    """Raised by a tool when its action cannot be carried out."""

    pass


class ToolPermissionError(ToolError):
    """Base exception for permission infrastructure failures."""

    pass


class PermissionStoreError(ToolPermissionError):
    """Raised when the permission backend cannot be read or written."""

    pass


class PermissionConsistencyError(ToolPermissionError):
    """Raised when persisted permissions differ from what was just written."""

    def __init__(
        self,
        tool_name: str,
        expected: frozenset[str],
        actual: frozenset[str],
    ) -> None:
        self.tool_name = tool_name
        self.expected = expected
        self.actual = actual
        missing = sorted(expected - actual)
        unexpected = sorted(actual - expected)
        super().__init__(
            f"Persisted permissions diverged after updating '{tool_name}' "
            f"(missing={missing}, unexpected={unexpected})"
        )
