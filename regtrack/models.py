"""Shared pydantic models — the contract between backends, the lifecycle manager and main.py."""

from datetime import timedelta
from enum import StrEnum

from pydantic import AwareDatetime, BaseModel, ConfigDict


class IssueState(StrEnum):
    OPEN = "open"
    CLOSED = "closed"


class DryRunScope(StrEnum):
    MUTATIONS = "mutations"  # lookups still reach the backend
    ALL = "all"  # every backend call is skipped, lookup included


class LifecycleAction(StrEnum):
    CREATED = "created"
    REOPENED = "reopened"
    COMMENTED = "commented"
    SKIPPED = "skipped"  # open and recently updated


class TrackedIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    state: IssueState
    updated_at: AwareDatetime
    labels: list[str] = []
    url: str | None = None


class CreatedIssue(BaseModel):
    """Returned by create_issue — minimal, just what the caller needs."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    url: str | None = None


class RegressionReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    test_name: str
    description: str


class OperationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    org: str
    repo: str
    dry_run: bool = False
    dry_run_scope: DryRunScope = DryRunScope.ALL


class IssueTemplates(BaseModel):
    """Label, title, body and comment templates for one tracker.

    Templates use ``str.format`` fields: ``{test_name}`` for title and body,
    ``{description}`` for comments.
    """

    model_config = ConfigDict(frozen=True)

    label: str = "auto:perf"
    title: str = "[performance] {test_name}"
    body: str = "\n### Auto-generated issue tracking performance regression\n* **Test name**: {test_name}"
    new_comment: str = "\nA new regression for this test has been detected:\n{description}"
    reopen_comment: str = "\nNew regression has been detected, reopening this issue:\n{description}"
    stale_after: timedelta = timedelta(days=10)

    def render_title(self, test_name: str) -> str:
        return self.title.format(test_name=test_name)

    def render_body(self, test_name: str) -> str:
        return self.body.format(test_name=test_name)
