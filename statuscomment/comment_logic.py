"""Rendering of the agent's status comment.

The agent posts a single comment on a pull request or issue and edits it as
work progresses. While running, the comment holds a "Claude Code is working…"
placeholder. When the run ends, ``update_comment_body`` turns the current text
into a finalized comment with a status header. The same function is safe to run
again on an already finalized comment: everything it (or the caller's trailer
step) added before is recognized and removed before the body is reassembled.
"""

import math
import re
from typing import Optional

from .models import CommentUpdateInput
from .urls import ensure_properly_encoded_url

WORKING_PATTERN = re.compile(
    r"Claude Code is working[….]{1,3}(?:\s*<img[^>]*>)?", re.IGNORECASE
)

# Greedy on purpose: the last link construct that ends the line wins.
PR_LINK_PATTERN = re.compile(r"\[Create .* PR\]\((.*)\)$", re.MULTILINE)

USERNAME_PATTERN = re.compile(r"@([a-zA-Z0-9-]+)")

JOB_RUN_LINK_PATTERN = re.compile(r"\n?\[View job run\]\([^)]+\)")
BRANCH_LINK_PATTERN = re.compile(r"\n?\[View branch\]\([^)]+\)")
DURATION_TRAILER_PATTERN = re.compile(r"\n*---\n*Duration: (?:[0-9]+m )?[0-9]+s")

# Header block left at the top of a comment by an earlier finalization
PRIOR_HEADER_PATTERN = re.compile(
    r"\A\*\*Claude (?:finished @(?P<username>[^\s*']+)'s task(?: in (?:[0-9]+m )?[0-9]+s)?"
    r"|encountered an error(?: after (?:[0-9]+m )?[0-9]+s)?)\*\*"
    r"(?:\s*```\n.*?\n```)?"
    r"\s*(?:---[ \t]*(?:\n|\Z))?",
    re.DOTALL,
)

DEFAULT_USERNAME = "user"


def format_duration(duration_ms: Optional[float]) -> str:
    """Format a duration in milliseconds as "1m 5s" or "42s"."""
    if duration_ms is None:
        return ""
    total_seconds = math.floor(duration_ms / 1000 + 0.5)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}m {seconds}s" if minutes > 0 else f"{seconds}s"


def strip_working_message(body: str) -> str:
    return WORKING_PATTERN.sub("", body).strip()


def extract_pr_link(body: str) -> tuple[str, Optional[str]]:
    """Pull a "Create … PR" link out of the body.

    Returns the body without the link and the normalized link URL. If there is
    no link, or its URL cannot be normalized, the body is returned untouched
    and the URL is None.
    """
    match = PR_LINK_PATTERN.search(body)
    if not match or not match.group(1):
        return body, None

    encoded_url = ensure_properly_encoded_url(match.group(1))
    if not encoded_url:
        return body, None

    return body.replace(match.group(0), "", 1).strip(), encoded_url


def find_username(body: str, trigger_username: Optional[str] = None) -> str:
    """Pick the username for the header.

    Order: explicit trigger, the user named in an earlier finished header,
    the first @mention, then "user".
    """
    if trigger_username:
        return trigger_username
    prior = PRIOR_HEADER_PATTERN.match(body)
    if prior and prior.group("username"):
        return prior.group("username")
    match = USERNAME_PATTERN.search(body)
    return match.group(1) if match else DEFAULT_USERNAME


def build_header(action_failed: bool, duration: str, username: str) -> str:
    if action_failed:
        header = "**Claude encountered an error"
        if duration:
            header += f" after {duration}"
    else:
        header = f"**Claude finished @{username}'s task"
        if duration:
            header += f" in {duration}"
    return header + "**"


def clean_body_content(body: str) -> str:
    """Remove header blocks and trailers left by earlier updates."""
    body = PRIOR_HEADER_PATTERN.sub("", body, count=1)
    body = JOB_RUN_LINK_PATTERN.sub("", body)
    body = BRANCH_LINK_PATTERN.sub("", body)
    body = DURATION_TRAILER_PATTERN.sub("", body)
    return body


def update_comment_body(update: CommentUpdateInput) -> str:
    """Render the finalized comment body for a finished run."""
    body_content = strip_working_message(update.current_body)
    body_content, _ = extract_pr_link(body_content)

    duration_ms = update.execution_details.duration_ms if update.execution_details else None
    duration = format_duration(duration_ms)

    username = find_username(body_content, update.trigger_username)
    new_body = build_header(update.action_failed, duration, username)

    if update.action_failed and update.error_details:
        new_body += f"\n\n```\n{update.error_details}\n```"

    new_body += "\n\n---\n"
    new_body += clean_body_content(body_content)

    return new_body.strip()


def append_links(
    body: str,
    job_url: Optional[str] = None,
    branch_link: Optional[str] = None,
    pr_link: Optional[str] = None,
) -> str:
    """Append job, branch and PR links below a rendered comment body.

    Each line added here is removed (or extracted) by ``update_comment_body``
    on the next update, so repeated updates never stack links.
    """
    links = []
    if job_url:
        links.append(f"[View job run]({job_url})")
    if branch_link:
        links.append(f"[View branch]({branch_link})")
    if pr_link:
        links.append(f"[Create a PR]({pr_link})")

    if not links:
        return body
    return body + "\n\n" + "\n".join(links)


def finalize_comment_body(update: CommentUpdateInput) -> str:
    """Render the comment body and append the run's links.

    The PR link defaults to one already present in the current body, so a
    "Create PR" link posted while the run was in progress survives
    finalization in normalized form.
    """
    pr_link = update.pr_link
    if not pr_link:
        _, pr_link = extract_pr_link(strip_working_message(update.current_body))

    body = update_comment_body(update)
    return append_links(
        body,
        job_url=update.job_url,
        branch_link=update.branch_link,
        pr_link=pr_link,
    )
