"""Shared fixtures: every CLI invocation goes through a patched Popen."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from dayone_mcp import runner


@pytest.fixture
def mock_popen(mocker: Any) -> Any:
    process = mocker.MagicMock()
    process.communicate.return_value = ("", "")
    process.returncode = 0
    process.pid = 4321
    return mocker.patch("dayone_mcp.runner.Popen", return_value=process)


@pytest.fixture
def cli_output(mock_popen: Any) -> Any:
    """Set the next CLI stdout: ``cli_output("text")``."""

    def _set(stdout: str, stderr: str = "", returncode: int = 0) -> None:
        process = mock_popen.return_value
        process.communicate.return_value = (stdout, stderr)
        process.returncode = returncode

    return _set


@pytest.fixture
def reset_active_processes() -> Iterator[None]:
    runner._active_processes.clear()
    yield
    runner._active_processes.clear()
