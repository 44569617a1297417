"""Result values returned across the configuration file boundary."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class OperationResult:
    """Outcome of a file operation.

    ``error`` carries a human-readable message when ``success`` is false.
    """

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, data: Any = None) -> "OperationResult":
        return cls(success=False, data=data, error=error)

    def __bool__(self) -> bool:
        return self.success
