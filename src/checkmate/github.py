"""Derive review-context state keys from GitHub URLs.

A pull request at ``https://github.com/octo/repo/pull/42`` is stored under
the state key ``"octo/repo#42"``; a plain repository page under
``"octo/repo"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from checkmate.errors import github_error

__all__ = [
    "RepoInfo",
    "extract_repo_info",
    "is_pr_page",
    "pr_identifier",
    "state_key_for_url",
]

PR_URL_REGEX = re.compile(r"github\.com/([^/]+)/([^/]+)/pull/(\d+)")
REPO_URL_REGEX = re.compile(r"github\.com/([^/]+)/([^/?#]+)(?:[/?#]|$)")


@dataclass
class RepoInfo:
    owner: str = ""
    repo: str = ""
    pr_number: Optional[int] = None
    is_valid: bool = False


def extract_repo_info(url: str) -> RepoInfo:
    """Owner, repository and PR number from a GitHub URL.

    Pull request URLs are tried first, then repository URLs. Anything else
    gives an invalid :class:`RepoInfo`.
    """
    match = PR_URL_REGEX.search(url)
    if match:
        return RepoInfo(match.group(1), match.group(2), int(match.group(3)), True)

    match = REPO_URL_REGEX.search(url)
    if match:
        return RepoInfo(match.group(1), match.group(2), None, True)

    return RepoInfo()


def pr_identifier(info: RepoInfo) -> Optional[str]:
    if not info.is_valid or not info.owner or not info.repo:
        return None
    if info.pr_number:
        return f"{info.owner}/{info.repo}#{info.pr_number}"
    return f"{info.owner}/{info.repo}"


def is_pr_page(url: str) -> bool:
    return PR_URL_REGEX.search(url) is not None


def state_key_for_url(url: str) -> str:
    """State key for the review at ``url``.

    Raises:
        ExtensionError: ``github`` category when ``url`` is not a GitHub
            repository or pull request URL.
    """
    key = pr_identifier(extract_repo_info(url))
    if key is None:
        raise github_error(
            "Failed to extract repository information from URL",
            details={"url": url},
        )
    return key
