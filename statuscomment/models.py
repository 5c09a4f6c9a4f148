"""Data models for status comment updates and execution metrics."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ExecutionDetails:
    """Timing and cost data for a finished agent run."""

    cost_usd: Optional[float] = None
    duration_ms: Optional[float] = None
    duration_api_ms: Optional[float] = None


@dataclass(frozen=True)
class CommentUpdateInput:
    """Everything needed to render the next version of a status comment."""

    current_body: str
    action_failed: bool
    execution_details: Optional[ExecutionDetails] = None
    branch_name: Optional[str] = None
    trigger_username: Optional[str] = None
    error_details: Optional[str] = None

    # Links appended after the transformed body by the caller
    job_url: Optional[str] = None
    branch_link: Optional[str] = None
    pr_link: Optional[str] = None


@dataclass
class ExecutionMetrics:
    """Metrics extracted from the final result entry of an execution log."""

    num_turns: Optional[int] = None
    cost_usd: Optional[float] = None
    duration_ms: Optional[float] = None
    duration_api_ms: Optional[float] = None
    is_error: bool = False

    @classmethod
    def from_result(cls, result: dict[str, Any]) -> "ExecutionMetrics":
        return cls(
            num_turns=result.get("num_turns"),
            cost_usd=result.get("total_cost_usd") or result.get("cost_usd"),
            duration_ms=result.get("duration_ms"),
            duration_api_ms=result.get("duration_api_ms"),
            is_error=bool(result.get("is_error") or False),
        )

    def summary(self) -> str:
        """Generate human-readable summary."""
        cost = f"${self.cost_usd:.4f}" if self.cost_usd is not None else "N/A"
        lines = [
            f"Turns: {self.num_turns}",
            f"Cost: {cost}",
            f"Duration: {self.duration_ms}ms",
            f"Error: {str(self.is_error).lower()}",
        ]
        return "\n".join(lines)
