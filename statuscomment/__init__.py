"""statuscomment - Finalize an agent's status comment and report run metrics."""

from .comment_logic import append_links, finalize_comment_body, format_duration, update_comment_body
from .config import StatusCommentConfig
from .execution import execution_details_from_result, load_execution_result
from .metrics import build_series, report_metrics
from .models import CommentUpdateInput, ExecutionDetails, ExecutionMetrics
from .urls import ensure_properly_encoded_url

__all__ = [
    "CommentUpdateInput",
    "ExecutionDetails",
    "ExecutionMetrics",
    "StatusCommentConfig",
    "append_links",
    "build_series",
    "ensure_properly_encoded_url",
    "execution_details_from_result",
    "finalize_comment_body",
    "format_duration",
    "load_execution_result",
    "report_metrics",
    "update_comment_body",
]
