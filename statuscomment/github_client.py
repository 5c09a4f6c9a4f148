"""GitHub API client for reading and editing the status comment."""

from typing import Optional

from github import Auth, Github
from github.IssueComment import IssueComment
from github.Repository import Repository

from .config import StatusCommentConfig


class GitHubClient:
    """Client for the status comment on an issue or pull request."""

    def __init__(self, config: StatusCommentConfig, github: Optional[Github] = None):
        self.config = config
        self._github = github or Github(
            auth=Auth.Token(config.github_token),
            base_url=_api_base_url(config.server_url),
        )
        self._repo: Optional[Repository] = None

    @property
    def repo(self) -> Repository:
        if self._repo is None:
            self._repo = self._github.get_repo(self.config.repo)
        return self._repo

    def _get_raw_comment(self, comment_id: int) -> IssueComment:
        return self.repo.get_issue_comment(comment_id)

    def get_comment_body(self, comment_id: int) -> str:
        return self._get_raw_comment(comment_id).body or ""

    def update_comment(self, comment_id: int, body: str) -> None:
        if self.config.dry_run:
            print(f"[DRY RUN] Would update comment {comment_id}:\n{body[:200]}...", flush=True)
            return
        comment = self._get_raw_comment(comment_id)
        comment.edit(body)


def _api_base_url(server_url: str) -> str:
    """API root for github.com or a GitHub Enterprise server."""
    server_url = server_url.rstrip("/")
    if server_url in ("", "https://github.com"):
        return "https://api.github.com"
    return f"{server_url}/api/v3"
