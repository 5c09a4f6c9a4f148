#!/usr/bin/env python3
"""CLI entry point for statuscomment."""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv
load_dotenv()

from github import GithubException
import requests

from .comment_logic import finalize_comment_body
from .config import StatusCommentConfig
from .execution import execution_details_from_result, load_execution_result
from .github_client import GitHubClient
from .metrics import report_metrics
from .models import CommentUpdateInput


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="statuscomment - Finalize agent status comments and report run metrics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Update comment command
    update_parser = subparsers.add_parser(
        "update-comment",
        help="Rewrite the agent's status comment with the run outcome",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  statuscomment update-comment --comment-id 123456
  statuscomment update-comment --comment-id 123456 --failed --error-details "Timed out"
  statuscomment update-comment --comment-id 123456 --execution-file output.json --branch claude/issue-42
  statuscomment update-comment --comment-id 123456 --dry-run
""",
    )
    update_parser.add_argument("--comment-id", type=int, required=True, help="ID of the comment to update")
    update_parser.add_argument("--repo", default=None, help="GitHub repository (owner/repo, default: GITHUB_REPOSITORY)")
    update_parser.add_argument("--failed", action="store_true", help="Mark the run as failed")
    update_parser.add_argument("--error-details", default=None, help="Error text to show in the comment")
    update_parser.add_argument("--execution-file", default=None, help="Execution log to read duration from (default: OUTPUT_FILE)")
    update_parser.add_argument("--branch", default=None, help="Branch the agent worked on")
    update_parser.add_argument("--trigger-username", default=None, help="User who triggered the run")
    update_parser.add_argument("--pr-link", default=None, help="Link for creating a PR from the branch")
    update_parser.add_argument("--dry-run", action="store_true", help="Preview without making changes")

    # Report metrics command
    metrics_parser = subparsers.add_parser(
        "report-metrics",
        help="Send execution metrics to Datadog (never fails the run)",
    )
    metrics_parser.add_argument("--output-file", default=None, help="Execution log (default: OUTPUT_FILE)")
    metrics_parser.add_argument("--prefix", default=None, help="Metric name prefix (default: github)")
    metrics_parser.add_argument("--dry-run", action="store_true", help="Build the payload without sending it")

    return parser


def make_config(args: argparse.Namespace) -> StatusCommentConfig:
    """Build a StatusCommentConfig from the environment and CLI args."""
    config = StatusCommentConfig.from_env(os.environ)
    config.dry_run = args.dry_run
    if getattr(args, "repo", None):
        config.repo = args.repo
    if getattr(args, "output_file", None):
        config.output_file = args.output_file
    if getattr(args, "prefix", None) is not None:
        config.metric_prefix = args.prefix
    return config


def build_update_input(
    args: argparse.Namespace,
    config: StatusCommentConfig,
    current_body: str,
) -> CommentUpdateInput:
    """Collect the run outcome from CLI args and the execution log."""
    execution_details = None
    action_failed = args.failed

    execution_file = args.execution_file or config.output_file
    if execution_file:
        result = load_execution_result(execution_file)
        if result is not None:
            execution_details = execution_details_from_result(result)
            action_failed = action_failed or bool(result.get("is_error"))

    return CommentUpdateInput(
        current_body=current_body,
        action_failed=action_failed,
        execution_details=execution_details,
        branch_name=args.branch,
        trigger_username=args.trigger_username or config.actor or None,
        error_details=args.error_details,
        job_url=config.job_url or None,
        branch_link=config.branch_url(args.branch) if args.branch else None,
        pr_link=args.pr_link,
    )


def cmd_update_comment(args: argparse.Namespace, client: GitHubClient | None = None) -> int:
    config = make_config(args)

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    client = client or GitHubClient(config)

    try:
        current_body = client.get_comment_body(args.comment_id)
        update = build_update_input(args, config, current_body)
        new_body = finalize_comment_body(update)
        client.update_comment(args.comment_id, new_body)
    except (GithubException, requests.RequestException) as e:
        print(f"Error: failed to update comment {args.comment_id}: {e}", file=sys.stderr)
        return 1

    status = "failed" if update.action_failed else "finished"
    print(f"Updated comment {args.comment_id} ({status})")
    return 0


def cmd_report_metrics(args: argparse.Namespace) -> int:
    config = make_config(args)
    report_metrics(config)
    # Metrics reporting never fails the run
    return 0


def main() -> None:
    parser = create_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.dry_run:
        print("DRY RUN MODE\n")

    commands = {
        "update-comment": cmd_update_comment,
        "report-metrics": cmd_report_metrics,
    }

    handler = commands.get(args.command)
    if handler:
        exit_code = handler(args)
    else:
        parser.print_help()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
