"""Shared test fixtures for tokenplan-cli tests.

Provides CliRunner fixtures, fixture file paths and logging isolation
for testing CLI commands.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

# File name constants
DISTRIBUTION_YAML_FILENAME = "distribution.yaml"

ROUTER_ADDRESS = "0x10ED43C718714eb63d5aA57B78B54704E256024E"
PAYMENT_ASSET_ADDRESS = "0x55d398326f99059fF775485246999027B3197955"


@pytest.fixture(autouse=True)
def quiet_structlog() -> Generator[None, None, None]:
    """Keep compiler log lines out of command output.

    Commands invoked directly skip the group's configure_logging call, so
    structlog would otherwise print debug events into CliRunner's stdout.
    The cli group reconfigures logging and replaces root handlers; both
    are restored afterwards.
    """
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def deployment_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Development build environment with a liquidity router."""
    monkeypatch.setenv("TOKENPLAN_LIQUIDITY_ROUTER", ROUTER_ADDRESS)
    monkeypatch.delenv("TOKENPLAN_BUILD_MODE", raising=False)
    monkeypatch.delenv("TOKENPLAN_PAYMENT_ASSET_ADDRESS", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def valid_distribution_yaml(fixtures_dir: Path) -> Path:
    """Return the path to a valid distribution.yaml fixture."""
    return fixtures_dir / "valid_distribution.yaml"


@pytest.fixture
def invalid_distribution_yaml(fixtures_dir: Path) -> Path:
    """Return the path to an invalid distribution.yaml fixture."""
    return fixtures_dir / "invalid_distribution.yaml"


@pytest.fixture
def oversubscribed_distribution_yaml(fixtures_dir: Path) -> Path:
    """Return the path to a distribution allocating more than total supply."""
    return fixtures_dir / "oversubscribed_distribution.yaml"


@pytest.fixture
def temp_distribution_yaml(isolated_runner: CliRunner, valid_distribution_yaml: Path) -> Path:
    """Copy the valid fixture to ./distribution.yaml in the isolated filesystem."""
    temp_path = Path(DISTRIBUTION_YAML_FILENAME)
    temp_path.write_text(valid_distribution_yaml.read_text())
    return temp_path


@pytest.fixture
def create_distribution_yaml(isolated_runner: CliRunner) -> Callable[..., Path]:
    """Factory fixture to create distribution.yaml files with custom content."""

    def _create(content: str, filename: str = DISTRIBUTION_YAML_FILENAME) -> Path:
        path = Path(filename)
        path.write_text(content)
        return path

    return _create
