"""Issue lifecycle for performance regressions.

One labeled issue per regressing test, correlated by title. A report for a test
with no issue creates one; a report for a closed issue reopens it; a report for
an open issue only comments when the issue has been quiet for longer than the
staleness threshold.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from regtrack.backends.base import IssueBackend
from regtrack.backends.github import GitHubBackend
from regtrack.errors import ConfigurationError
from regtrack.models import (
    IssueState,
    IssueTemplates,
    LifecycleAction,
    OperationConfig,
    RegressionReport,
    TrackedIssue,
)
from regtrack.runner import OperationRunner

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class IssueHandler:
    def __init__(
        self,
        backend: IssueBackend,
        config: OperationConfig,
        templates: IssueTemplates | None = None,
        clock: Clock = _utcnow,
    ) -> None:
        self.backend = backend
        self.config = config
        self.templates = templates or IssueTemplates()
        self.runner = OperationRunner(config.dry_run, config.dry_run_scope)
        self._clock = clock

    @property
    def _where(self) -> str:
        return f"{self.config.org}/{self.config.repo}"

    def add_issue(self, test_name: str, description: str) -> LifecycleAction:
        """Create, reopen or comment on the issue tracking test_name."""
        report = RegressionReport(test_name=test_name, description=description)
        title = self.templates.render_title(report.test_name)
        issue = self.find_issue(title)

        if issue is None:
            action = self._create_issue(title, report)
        elif issue.state == IssueState.CLOSED:
            action = self._reopen_issue(issue, report)
        elif self._clock() - issue.updated_at > self.templates.stale_after:
            self._add_comment(issue.number, self.templates.new_comment.format(description=report.description))
            action = LifecycleAction.COMMENTED
        else:
            action = LifecycleAction.SKIPPED

        logger.info("%s: %s '%s' in %s", report.test_name, action.value, title, self._where)
        return action

    def close_issue(self, number: int) -> None:
        org, repo = self.config.org, self.config.repo
        self.runner.run(
            f"closing issue #{number} in repo '{self._where}'",
            lambda: self.backend.close_issue(org, repo, number),
        )

    def find_issue(self, title: str) -> TrackedIssue | None:
        """Return the labeled issue whose title is exactly title, if any."""
        org, repo = self.config.org, self.config.repo
        issues = self.runner.run(
            f"listing issues in repo '{self._where}'",
            lambda: self.backend.list_issues(org, repo, [self.templates.label]),
            mutates=False,
        )
        for issue in issues or []:
            if issue.title == title:
                return issue
        return None

    def _create_issue(self, title: str, report: RegressionReport) -> LifecycleAction:
        org, repo = self.config.org, self.config.repo
        body = self.templates.render_body(report.test_name)
        comment = self.templates.new_comment.format(description=report.description)
        created = self.runner.run(
            f"creating issue '{title}' in repo '{self._where}'",
            lambda: self.backend.create_issue(org, repo, title, body),
        )
        # created is None only in dry-run, where the calls below are skipped too
        self.runner.run(
            f"adding label '{self.templates.label}' to issue '{title}' in repo '{self._where}'",
            lambda: self.backend.add_labels(org, repo, created.number, [self.templates.label]),  # type: ignore[union-attr]
        )
        self.runner.run(
            f"adding comment to issue '{title}' in repo '{self._where}'",
            lambda: self.backend.create_comment(org, repo, created.number, comment),  # type: ignore[union-attr]
        )
        return LifecycleAction.CREATED

    def _reopen_issue(self, issue: TrackedIssue, report: RegressionReport) -> LifecycleAction:
        org, repo = self.config.org, self.config.repo
        self.runner.run(
            f"reopening issue '{issue.title}' in repo '{self._where}'",
            lambda: self.backend.reopen_issue(org, repo, issue.number),
        )
        self._add_comment(issue.number, self.templates.reopen_comment.format(description=report.description))
        return LifecycleAction.REOPENED

    def _add_comment(self, number: int, body: str) -> None:
        org, repo = self.config.org, self.config.repo
        self.runner.run(
            f"adding comment to issue #{number} in repo '{self._where}'",
            lambda: self.backend.create_comment(org, repo, number, body),
        )


def setup(
    credential: str,
    config: OperationConfig,
    *,
    templates: IssueTemplates | None = None,
    backend: IssueBackend | None = None,
    clock: Clock = _utcnow,
) -> IssueHandler:
    """Build an IssueHandler, authenticating a GitHub backend unless one is given."""
    if backend is None:
        if not credential:
            raise ConfigurationError("Cannot authenticate to github: empty token")
        backend = GitHubBackend(credential)
    return IssueHandler(backend, config, templates=templates, clock=clock)
