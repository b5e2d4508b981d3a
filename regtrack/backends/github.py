"""GitHub REST API v3 backend."""

import subprocess

import httpx

from regtrack.backends.base import IssueBackend
from regtrack.errors import ConfigurationError
from regtrack.models import CreatedIssue, IssueState, TrackedIssue
from regtrack.settings import RegtrackSettings

BASE_URL = "https://api.github.com"
PER_PAGE = 100


def token_from_settings(settings: RegtrackSettings) -> str:
    if settings.github_auth == "gh-cli":
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise ConfigurationError("gh auth token failed. Run: gh auth login")
        return result.stdout.strip()
    if settings.github_token:
        return settings.github_token.get_secret_value()
    raise ConfigurationError("No GitHub credentials. Set REGTRACK_GITHUB_TOKEN or github_token in your profile.")


class GitHubBackend(IssueBackend):
    def __init__(self, token: str) -> None:
        if not token:
            raise ConfigurationError("GitHub token is empty")
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if not url.startswith("http"):
            url = f"{BASE_URL}{url}"
        response = httpx.request(method, url, headers=self._headers, timeout=30, **kwargs)
        if response.status_code == 401:
            raise ConfigurationError("GitHub API returned 401. Check the token for the active profile.")
        response.raise_for_status()
        return response

    def _issue_from_node(self, node: dict) -> TrackedIssue:
        return TrackedIssue(
            number=node["number"],
            title=node["title"],
            state=IssueState(node.get("state", "open")),
            updated_at=node["updated_at"],
            labels=[label["name"] for label in node.get("labels", [])],
            url=node.get("html_url"),
        )

    def list_issues(self, org: str, repo: str, labels: list[str]) -> list[TrackedIssue]:
        params: dict | None = {"state": "all", "labels": ",".join(labels), "per_page": str(PER_PAGE)}
        url: str | None = f"/repos/{org}/{repo}/issues"
        result = []
        while url:
            response = self._request("GET", url, params=params)
            for node in response.json():
                # The issues endpoint also returns pull requests
                if "pull_request" in node:
                    continue
                result.append(self._issue_from_node(node))
            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            params = None
        return result

    def create_issue(self, org: str, repo: str, title: str, body: str) -> CreatedIssue:
        node = self._request("POST", f"/repos/{org}/{repo}/issues", json={"title": title, "body": body}).json()
        return CreatedIssue(number=node["number"], title=node["title"], url=node.get("html_url"))

    def add_labels(self, org: str, repo: str, number: int, labels: list[str]) -> None:
        self._request("POST", f"/repos/{org}/{repo}/issues/{number}/labels", json={"labels": labels})

    def close_issue(self, org: str, repo: str, number: int) -> None:
        self._set_state(org, repo, number, IssueState.CLOSED)

    def reopen_issue(self, org: str, repo: str, number: int) -> None:
        self._set_state(org, repo, number, IssueState.OPEN)

    def _set_state(self, org: str, repo: str, number: int, state: IssueState) -> None:
        self._request("PATCH", f"/repos/{org}/{repo}/issues/{number}", json={"state": state.value})

    def create_comment(self, org: str, repo: str, number: int, body: str) -> None:
        self._request("POST", f"/repos/{org}/{repo}/issues/{number}/comments", json={"body": body})
