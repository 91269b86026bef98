"""Error reporting for tokenplan-cli.

Commands fail in three places: loading the distribution, compiling it,
and writing output files. Each has a translator here that turns the
underlying exception into a CLIError carrying the operator message and
exit code; commands raise the result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from pydantic import ValidationError as PydanticValidationError

from tokenplan_cli.output import error

if TYPE_CHECKING:
    from tokenplan_core import TokenplanError


EXIT_USER_ERROR = 1  # distribution invalid, supply exceeded, environment value missing
EXIT_SYSTEM_ERROR = 2  # file missing or not writable


class CLIError(click.ClickException):
    """Operator-facing failure, printed through the rich console."""

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """List validation failures one field path per line.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - tiers.0.price: Input should be greater than or equal to 0"
    """
    lines = ["Validation failed:"]
    for detail in err.errors():
        location = ".".join(str(part) for part in detail["loc"])
        lines.append(f"  - {location}: {detail['msg']}")
    return "\n".join(lines)


def distribution_error(err: Exception, path: str) -> CLIError:
    """Translate a failure to load ``path`` as a distribution.

    Args:
        err: FileNotFoundError, a PyYAML error, or a pydantic ValidationError.
        path: Path as given on the command line.
    """
    if isinstance(err, FileNotFoundError):
        return CLIError(
            f"File not found: {path}\n\n"
            "Use --file to specify a distribution.yaml, or --preset for a built-in distribution.",
            exit_code=EXIT_SYSTEM_ERROR,
        )
    if isinstance(err, PydanticValidationError):
        return CLIError(f"Invalid configuration in {path}:\n{format_pydantic_error(err)}")

    # PyYAML marked errors know where parsing stopped
    detail = str(err)
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        detail = (
            f"YAML syntax error at line {mark.line + 1}, column {mark.column + 1}: "
            f"{getattr(err, 'problem', None)}"
        )
    return CLIError(f"Invalid YAML in {path}: {detail}")


def compilation_error(err: TokenplanError, step: str) -> CLIError:
    """Report a tokenplan-core failure during ``step`` ("Validation", "Compilation")."""
    return CLIError(f"{step} failed: {err.user_message}")


def write_error(path: str) -> CLIError:
    return CLIError(f"Permission denied: Cannot write to {path}", exit_code=EXIT_SYSTEM_ERROR)
