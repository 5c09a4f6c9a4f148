"""Configuration for status comment updates and metrics reporting."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional


@dataclass
class StatusCommentConfig:
    """Settings for the comment update and metrics commands.

    Built explicitly by the caller, usually via ``from_env``, and passed to the
    functions that need it.
    """

    # GitHub settings
    github_token: str = ""
    repo: str = ""  # Format: "owner/repo"
    server_url: str = "https://github.com"
    run_id: str = ""

    # Workflow context, used for metric tags
    event_name: str = ""
    actor: str = ""
    workflow: str = ""

    # Datadog settings
    dd_api_key: str = ""
    dd_site: str = "datadoghq.com"
    metric_prefix: str = "github"

    # Execution log written by the agent run
    output_file: Optional[str] = None

    # Behavior
    dry_run: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "StatusCommentConfig":
        """Build a config from GitHub Actions style environment variables."""
        return cls(
            github_token=environ.get("GITHUB_TOKEN", ""),
            repo=environ.get("GITHUB_REPOSITORY", ""),
            server_url=environ.get("GITHUB_SERVER_URL") or "https://github.com",
            run_id=environ.get("GITHUB_RUN_ID", ""),
            event_name=environ.get("GITHUB_EVENT_NAME", ""),
            actor=environ.get("GITHUB_ACTOR", ""),
            workflow=environ.get("GITHUB_WORKFLOW", ""),
            dd_api_key=environ.get("DD_API_KEY", ""),
            dd_site=environ.get("DD_SITE") or "datadoghq.com",
            output_file=environ.get("OUTPUT_FILE") or None,
        )

    def validate(self) -> list[str]:
        """Validate settings needed to update a comment and return list of errors."""
        errors = []

        if not self.github_token:
            errors.append("GITHUB_TOKEN environment variable is required")
        if not self.repo:
            errors.append("Repository (--repo or GITHUB_REPOSITORY) is required")
        elif "/" not in self.repo:
            errors.append("Repository must be in format 'owner/repo'")

        return errors

    @property
    def repo_owner(self) -> str:
        if "/" in self.repo:
            return self.repo.split("/")[0]
        return ""

    @property
    def repo_name(self) -> str:
        if "/" in self.repo:
            return self.repo.split("/")[1]
        return ""

    @property
    def job_url(self) -> str:
        """Link to the workflow run, or empty when the run id is unknown."""
        if not self.repo or not self.run_id:
            return ""
        return f"{self.server_url}/{self.repo}/actions/runs/{self.run_id}"

    def branch_url(self, branch_name: str) -> str:
        return f"{self.server_url}/{self.repo}/tree/{branch_name}"

    @property
    def series_url(self) -> str:
        return f"https://api.{self.dd_site}/api/v2/series"
