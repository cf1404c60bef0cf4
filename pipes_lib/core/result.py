"""
Lifecycle states and completion reports for pipes.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
from enum import Enum


class PipeState(Enum):
    """Lifecycle state of a grower."""
    IDLE = "idle"
    GENERATING = "generating"
    FINISHED = "finished"


class FinishReason(Enum):
    """Why a grower stopped."""
    COMPLETED = "completed"
    ENCLOSED = "enclosed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ErrorCode(Enum):
    """Standard error codes attached to reports."""
    OUTSIDE_DOMAIN = "OUTSIDE_DOMAIN"
    COLLISION_BLOCKED = "COLLISION_BLOCKED"
    ENCLOSED = "ENCLOSED"


@dataclass
class PipeReport:
    """
    Summary delivered when a pipe finishes.

    This is the payload of the completion notification consumed by the pool.
    """

    pipe_id: int
    reason: FinishReason
    turn_count: int
    segment_count: int
    max_turns: int
    message: str = ""
    warnings: List[str] = field(default_factory=list)
    error_codes: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_success(self) -> bool:
        """Completed through its full turn budget."""
        return self.reason == FinishReason.COMPLETED

    def add_warning(self, warning: str, code: Optional[ErrorCode] = None) -> None:
        """Add a warning message with optional error code."""
        self.warnings.append(warning)
        if code is not None:
            self.error_codes.append(code.value)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization (JSON-safe)."""
        return {
            "pipe_id": self.pipe_id,
            "reason": self.reason.value,
            "turn_count": self.turn_count,
            "segment_count": self.segment_count,
            "max_turns": self.max_turns,
            "message": self.message,
            "warnings": self.warnings,
            "error_codes": self.error_codes,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PipeReport":
        """Create from dictionary."""
        return cls(
            pipe_id=d["pipe_id"],
            reason=FinishReason(d["reason"]),
            turn_count=d["turn_count"],
            segment_count=d["segment_count"],
            max_turns=d["max_turns"],
            message=d.get("message", ""),
            warnings=d.get("warnings", []),
            error_codes=d.get("error_codes", []),
            metadata=d.get("metadata", {}),
        )
