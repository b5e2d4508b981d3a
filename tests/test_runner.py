"""Tests for regtrack.runner."""

import logging

import pytest

from regtrack.errors import BackendError, ConfigurationError
from regtrack.models import DryRunScope
from regtrack.runner import OperationRunner


def _boom() -> None:
    raise RuntimeError("boom")


def test_runs_and_returns_value() -> None:
    assert OperationRunner().run("answering", lambda: 42) == 42


def test_wraps_failure_with_operation_name() -> None:
    with pytest.raises(BackendError, match="failed frobnicating: boom") as excinfo:
        OperationRunner().run("frobnicating", _boom)
    assert excinfo.value.operation == "frobnicating"
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_configuration_error_passes_through() -> None:
    def bad_token() -> None:
        raise ConfigurationError("GitHub API returned 401")

    with pytest.raises(ConfigurationError):
        OperationRunner().run("listing", bad_token)


def test_dry_run_skips_and_logs(caplog: pytest.LogCaptureFixture) -> None:
    called = []
    with caplog.at_level(logging.INFO, logger="regtrack.runner"):
        result = OperationRunner(dry_run=True).run("creating issue", lambda: called.append(1))
    assert result is None
    assert called == []
    assert "[dry-run] skipped creating issue" in caplog.text


def test_dry_run_never_raises() -> None:
    assert OperationRunner(dry_run=True).run("frobnicating", _boom) is None


@pytest.mark.parametrize(
    ("dry_run", "scope", "mutates", "skipped"),
    [
        (False, DryRunScope.ALL, True, False),
        (False, DryRunScope.ALL, False, False),
        (True, DryRunScope.ALL, True, True),
        (True, DryRunScope.ALL, False, True),
        (True, DryRunScope.MUTATIONS, True, True),
        (True, DryRunScope.MUTATIONS, False, False),
    ],
)
def test_skip_matrix(dry_run: bool, scope: DryRunScope, mutates: bool, skipped: bool) -> None:
    runner = OperationRunner(dry_run=dry_run, scope=scope)
    assert runner.skips(mutates) is skipped
    assert (runner.run("op", lambda: "ran", mutates=mutates) is None) is skipped
