"""Tests for Datadog metrics reporting (HTTP session is mocked)."""

import json
import os
import tempfile
from unittest.mock import MagicMock, Mock

import requests

from statuscomment.config import StatusCommentConfig
from statuscomment.metrics import build_series, build_tags, metric_name, report_metrics
from statuscomment.models import ExecutionMetrics


RESULT = {
    "type": "result",
    "num_turns": 6,
    "total_cost_usd": 0.4213,
    "duration_ms": 65000,
    "duration_api_ms": 40000,
    "is_error": False,
}


def _config(**overrides) -> StatusCommentConfig:
    values = dict(
        repo="owner/repo",
        event_name="issue_comment",
        actor="alice",
        workflow="Claude",
        dd_api_key="dd-key",
    )
    values.update(overrides)
    return StatusCommentConfig(**values)


def _write_log(tmpdir: str, entries: list) -> str:
    path = os.path.join(tmpdir, "output.json")
    with open(path, "w") as f:
        json.dump(entries, f)
    return path


def test_metric_name():
    assert metric_name("github", "num_turns") == "github.claude_code_gh_action.num_turns"
    assert metric_name("", "num_turns") == "claude_code_gh_action.num_turns"


def test_metrics_from_result():
    metrics = ExecutionMetrics.from_result(RESULT)
    assert metrics.num_turns == 6
    assert metrics.cost_usd == 0.4213
    assert metrics.is_error is False


def test_metrics_cost_fallback_and_error_default():
    metrics = ExecutionMetrics.from_result({"type": "result", "cost_usd": 0.1})
    assert metrics.cost_usd == 0.1
    assert metrics.is_error is False
    assert metrics.num_turns is None


def test_build_tags():
    tags = build_tags(_config(), ExecutionMetrics(is_error=True))
    assert tags == [
        "repo:owner/repo",
        "event:issue_comment",
        "actor:alice",
        "workflow:Claude",
        "success:false",
    ]


def test_build_series_all_values():
    series = build_series(_config(), ExecutionMetrics.from_result(RESULT), timestamp=1700000000)
    names = [s["metric"] for s in series]
    assert names == [
        "github.claude_code_gh_action.num_turns",
        "github.claude_code_gh_action.cost_usd",
        "github.claude_code_gh_action.duration_ms",
        "github.claude_code_gh_action.duration_api_ms",
        "github.claude_code_gh_action.executions",
    ]
    assert all(s["type"] == 1 for s in series[:-1])
    assert series[-1]["type"] == 0
    assert series[-1]["points"] == [{"timestamp": 1700000000, "value": 1}]
    assert series[0]["points"] == [{"timestamp": 1700000000, "value": 6}]
    assert "success:true" in series[0]["tags"]


def test_build_series_skips_missing_values():
    series = build_series(_config(), ExecutionMetrics(num_turns=3), timestamp=1)
    assert [s["metric"].rsplit(".", 1)[1] for s in series] == ["num_turns", "executions"]


def test_report_skipped_without_api_key():
    session = Mock()
    assert report_metrics(_config(dd_api_key="", output_file="out.json"), session=session) is False
    session.post.assert_not_called()


def test_report_skipped_without_output_file():
    session = Mock()
    assert report_metrics(_config(output_file=None), session=session) is False
    session.post.assert_not_called()


def test_report_skipped_without_result_entry():
    session = Mock()
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_log(tmpdir, [{"type": "assistant"}])
        assert report_metrics(_config(output_file=path), session=session) is False
    session.post.assert_not_called()


def test_report_posts_series():
    session = Mock()
    session.post.return_value = Mock(ok=True, status_code=202)

    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_log(tmpdir, [{"type": "system"}, RESULT])
        config = _config(output_file=path, dd_site="datadoghq.eu")
        assert report_metrics(config, session=session, now=1700000000.7) is True

    session.post.assert_called_once()
    args, kwargs = session.post.call_args
    assert args[0] == "https://api.datadoghq.eu/api/v2/series"
    assert kwargs["headers"]["DD-API-KEY"] == "dd-key"
    series = kwargs["json"]["series"]
    assert len(series) == 5
    assert series[0]["points"][0]["timestamp"] == 1700000000


def test_report_non_2xx_returns_false():
    session = Mock()
    session.post.return_value = Mock(ok=False, status_code=403, reason="Forbidden", text="bad key")

    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_log(tmpdir, [RESULT])
        assert report_metrics(_config(output_file=path), session=session) is False


def test_report_swallows_connection_errors():
    session = Mock()
    session.post.side_effect = requests.ConnectionError("unreachable")

    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_log(tmpdir, [RESULT])
        assert report_metrics(_config(output_file=path), session=session) is False


def test_report_dry_run_does_not_post():
    session = Mock()
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_log(tmpdir, [RESULT])
        assert report_metrics(_config(output_file=path, dry_run=True), session=session) is True
    session.post.assert_not_called()


def test_report_closes_its_own_session(monkeypatch):
    session = MagicMock()
    session.__enter__.return_value = session
    session.post.return_value = Mock(ok=True, status_code=202)
    monkeypatch.setattr("statuscomment.metrics.requests.Session", lambda: session)

    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_log(tmpdir, [RESULT])
        assert report_metrics(_config(output_file=path)) is True

    session.post.assert_called_once()
    session.__exit__.assert_called_once()
