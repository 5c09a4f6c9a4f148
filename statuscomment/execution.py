"""Reading the agent's execution log.

The agent run writes a JSON array of messages to an output file. The last
element, when its ``type`` is ``"result"``, carries the run's turn count, cost,
timing and error flag.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .models import ExecutionDetails

logger = logging.getLogger(__name__)


def load_execution_result(path: str | Path) -> Optional[dict[str, Any]]:
    """Return the final result entry of an execution log, or None."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Error reading execution file {path}: {e}")
        return None

    if not isinstance(data, list) or not data:
        logger.info("No execution data found")
        return None

    last = data[-1]
    if not isinstance(last, dict) or last.get("type") != "result":
        logger.info("No result data found in execution file")
        return None

    return last


def execution_details_from_result(result: dict[str, Any]) -> ExecutionDetails:
    return ExecutionDetails(
        cost_usd=result.get("total_cost_usd") or result.get("cost_usd"),
        duration_ms=result.get("duration_ms"),
        duration_api_ms=result.get("duration_api_ms"),
    )
