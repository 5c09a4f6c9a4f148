"""Metrics reporting to Datadog.

Reads the final result entry from the agent's execution log and posts turn
count, cost and timing as one series batch. Reporting is best-effort: every
failure is logged and swallowed so the hosting workflow never fails because
metrics could not be sent.
"""

import logging
import time
from typing import Any, Optional

import requests

from .config import StatusCommentConfig
from .execution import load_execution_result
from .models import ExecutionMetrics

logger = logging.getLogger(__name__)

METRIC_NAMESPACE = "claude_code_gh_action"

# Datadog v2 series intake metric types
METRIC_TYPE_COUNT = 0
METRIC_TYPE_GAUGE = 1

GAUGE_FIELDS = ("num_turns", "cost_usd", "duration_ms", "duration_api_ms")

REQUEST_TIMEOUT = 10


def metric_name(prefix: str, name: str) -> str:
    if prefix:
        return f"{prefix}.{METRIC_NAMESPACE}.{name}"
    return f"{METRIC_NAMESPACE}.{name}"


def build_tags(config: StatusCommentConfig, metrics: ExecutionMetrics) -> list[str]:
    return [
        f"repo:{config.repo}",
        f"event:{config.event_name}",
        f"actor:{config.actor}",
        f"workflow:{config.workflow}",
        f"success:{str(not metrics.is_error).lower()}",
    ]


def build_series(
    config: StatusCommentConfig,
    metrics: ExecutionMetrics,
    timestamp: int,
) -> list[dict[str, Any]]:
    """Build the series payload: one gauge per known value plus an execution count."""
    tags = build_tags(config, metrics)
    series = []

    for field_name in GAUGE_FIELDS:
        value = getattr(metrics, field_name)
        if value is None:
            continue
        series.append({
            "metric": metric_name(config.metric_prefix, field_name),
            "type": METRIC_TYPE_GAUGE,
            "points": [{"timestamp": timestamp, "value": value}],
            "tags": tags,
        })

    series.append({
        "metric": metric_name(config.metric_prefix, "executions"),
        "type": METRIC_TYPE_COUNT,
        "points": [{"timestamp": timestamp, "value": 1}],
        "tags": tags,
    })

    return series


def _post_series(
    http: requests.Session,
    config: StatusCommentConfig,
    series: list[dict[str, Any]],
) -> requests.Response:
    return http.post(
        config.series_url,
        headers={
            "DD-API-KEY": config.dd_api_key,
            "Content-Type": "application/json",
        },
        json={"series": series},
        timeout=REQUEST_TIMEOUT,
    )


def report_metrics(
    config: StatusCommentConfig,
    session: Optional[requests.Session] = None,
    now: Optional[float] = None,
) -> bool:
    """Send execution metrics to Datadog. Returns True if they were accepted.

    Never raises.
    """
    try:
        if not config.dd_api_key:
            logger.info("Skipping Datadog metrics reporting (no API key provided)")
            return False

        if not config.output_file:
            logger.info("Skipping Datadog metrics reporting (no execution file)")
            return False

        result = load_execution_result(config.output_file)
        if result is None:
            return False

        metrics = ExecutionMetrics.from_result(result)
        if config.metric_prefix:
            logger.info(f"Reporting metrics to Datadog with prefix {config.metric_prefix}")
        for line in metrics.summary().splitlines():
            logger.info(f"  - {line}")

        timestamp = int(now if now is not None else time.time())
        series = build_series(config, metrics, timestamp)

        if config.dry_run:
            print(f"[DRY RUN] Would post {len(series)} series to {config.series_url}", flush=True)
            return True

        if session is not None:
            response = _post_series(session, config, series)
        else:
            with requests.Session() as http:
                response = _post_series(http, config, series)

        if not response.ok:
            logger.error(
                f"Failed to send metrics to Datadog: {response.status_code} {response.reason}"
            )
            logger.error(f"Response: {response.text}")
            return False

        logger.info("Successfully reported metrics to Datadog")
        return True

    except Exception as e:
        # Metrics must never fail the host workflow
        logger.error(f"Error reporting metrics to Datadog: {e}")
        return False
