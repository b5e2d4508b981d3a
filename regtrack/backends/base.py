"""Abstract base class for issue-tracking backends."""

from abc import ABC, abstractmethod

from regtrack.models import CreatedIssue, TrackedIssue


class IssueBackend(ABC):
    @abstractmethod
    def list_issues(self, org: str, repo: str, labels: list[str]) -> list[TrackedIssue]:
        """Return open and closed issues carrying every label in labels."""

    @abstractmethod
    def create_issue(self, org: str, repo: str, title: str, body: str) -> CreatedIssue: ...

    @abstractmethod
    def add_labels(self, org: str, repo: str, number: int, labels: list[str]) -> None: ...

    @abstractmethod
    def close_issue(self, org: str, repo: str, number: int) -> None: ...

    @abstractmethod
    def reopen_issue(self, org: str, repo: str, number: int) -> None: ...

    @abstractmethod
    def create_comment(self, org: str, repo: str, number: int, body: str) -> None: ...
