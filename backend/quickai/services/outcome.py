"""
QuickAI Backend - Action Result Type
=====================================

What:  The value every ActionService handler returns instead of raising.
How:   `ActionResult.success(content)` or `ActionResult.failure(kind, message)`;
       routes branch on `ok` and render the JSON envelope.
"""

from dataclasses import dataclass
from typing import Optional

from quickai.exceptions import ErrorKind
from quickai.schemas.action import ActionResponse


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of one action request.

    Invariants:
        ok=True   → content is set, error is None
        ok=False  → error and message are set, content is None
    """

    ok: bool
    content: Optional[str] = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, content: str) -> "ActionResult":
        return cls(ok=True, content=content)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ActionResult":
        return cls(ok=False, error=kind, message=message)

    def to_response(self) -> ActionResponse:
        """Render as the `{success, content|message}` envelope."""
        if self.ok:
            return ActionResponse(success=True, content=self.content)
        return ActionResponse(success=False, message=self.message)
