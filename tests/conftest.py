"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from regtrack.backends.base import IssueBackend
from regtrack.issues import IssueHandler
from regtrack.models import CreatedIssue, IssueState, OperationConfig, TrackedIssue

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

MUTATIONS = {"create_issue", "add_labels", "close_issue", "reopen_issue", "create_comment"}


class FakeBackend(IssueBackend):
    """In-memory backend recording every call as (method, args...)."""

    def __init__(self, issues: list[TrackedIssue] | None = None, fail_on: str | None = None) -> None:
        self.issues = {issue.number: issue for issue in issues or []}
        self.calls: list[tuple] = []
        self.fail_on = fail_on

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name == self.fail_on:
            raise RuntimeError(f"{name} exploded")

    @property
    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    @property
    def mutations(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in MUTATIONS]

    def _replace(self, number: int, **update) -> None:
        self.issues[number] = self.issues[number].model_copy(update={"updated_at": NOW, **update})

    def list_issues(self, org: str, repo: str, labels: list[str]) -> list[TrackedIssue]:
        self._record("list_issues", org, repo, labels)
        return [i for i in self.issues.values() if set(labels) <= set(i.labels)]

    def create_issue(self, org: str, repo: str, title: str, body: str) -> CreatedIssue:
        self._record("create_issue", org, repo, title, body)
        number = max(self.issues, default=0) + 1
        self.issues[number] = TrackedIssue(number=number, title=title, state=IssueState.OPEN, updated_at=NOW)
        return CreatedIssue(number=number, title=title)

    def add_labels(self, org: str, repo: str, number: int, labels: list[str]) -> None:
        self._record("add_labels", org, repo, number, labels)
        self._replace(number, labels=[*self.issues[number].labels, *labels])

    def close_issue(self, org: str, repo: str, number: int) -> None:
        self._record("close_issue", org, repo, number)
        self._replace(number, state=IssueState.CLOSED)

    def reopen_issue(self, org: str, repo: str, number: int) -> None:
        self._record("reopen_issue", org, repo, number)
        self._replace(number, state=IssueState.OPEN)

    def create_comment(self, org: str, repo: str, number: int, body: str) -> None:
        self._record("create_comment", org, repo, number, body)
        self._replace(number)


def tracked_issue(
    number: int = 7,
    title: str = "[performance] load-test",
    state: IssueState = IssueState.OPEN,
    age: timedelta = timedelta(days=1),
    labels: list[str] | None = None,
) -> TrackedIssue:
    return TrackedIssue(
        number=number,
        title=title,
        state=state,
        updated_at=NOW - age,
        labels=["auto:perf"] if labels is None else labels,
    )


@pytest.fixture
def config() -> OperationConfig:
    return OperationConfig(org="knative", repo="serving")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def handler(backend: FakeBackend, config: OperationConfig) -> IssueHandler:
    return IssueHandler(backend, config, clock=lambda: NOW)
