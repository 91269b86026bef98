"""Custom exception hierarchy for tokenplan-core.

This module defines the exception classes raised while compiling a
distribution:
- TokenplanError: Base exception for all tokenplan errors
- CompilationError: Base for the fatal compile-time failures
- SupplyExceededError: Obligations meet or exceed total supply
- UnresolvedReferenceError: A forward reference never resolved
- SchemaMismatchError: A record or action does not have the expected shape
- InvalidDateError: A calendar literal is not an absolute instant
- DeploymentEnvironmentError: A required environment value is missing

Every error is fatal. Messages carry enough context (amounts, ids) for an
operator to fix the distribution table; technical details go to structlog.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

logger = structlog.get_logger(__name__)


class TokenplanError(Exception):
    """Base exception for tokenplan.

    Args:
        user_message: Message to display to the operator.
        internal_details: Optional technical details, logged but not
            part of the exception message.

    Example:
        >>> raise TokenplanError(
        ...     "Distribution invalid",
        ...     internal_details="tiers[3].price: expected decimal, got 'abc'",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize TokenplanError with user message and optional internal details.

        Args:
            user_message: Message to display to the operator.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "tokenplan_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class CompilationError(TokenplanError):
    """Raised when a distribution cannot be compiled into a deployment plan.

    Compilation has no partial mode: any subclass aborts before a single
    action reaches the execution engine.
    """

    pass


class SupplyExceededError(CompilationError):
    """Raised when configured obligations meet or exceed total supply.

    Attributes:
        total_supply: Configured total supply in base units.
        allocated: Computed sum of obligations in base units.

    Example:
        >>> raise SupplyExceededError(total_supply=1000, allocated=1001)
        # Operator sees: "Allocations exceed total supply: allocated 1001
        #                 of 1000 (overshoot 1)"
    """

    def __init__(
        self,
        total_supply: int,
        allocated: int,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize SupplyExceededError with both totals.

        Args:
            total_supply: Configured total supply in base units.
            allocated: Computed sum of obligations in base units.
            internal_details: Technical details for internal logging only.
        """
        self.total_supply = total_supply
        self.allocated = allocated
        user_message = (
            f"Allocations exceed total supply: allocated {allocated} "
            f"of {total_supply} (overshoot {self.overshoot})"
        )
        super().__init__(user_message, internal_details=internal_details)

    @property
    def overshoot(self) -> int:
        """Base units by which obligations reach or pass total supply."""
        return self.allocated - self.total_supply


class UnresolvedReferenceError(CompilationError):
    """Raised when a forward reference cannot be resolved.

    Attributes:
        reference: The action id that could not be resolved (None when the
            target was never bound at all).
        allocation_id: Id of the allocation holding the reference, if any.
        action_id: Id of the action holding the reference, if any.
    """

    def __init__(
        self,
        reference: str | None,
        *,
        allocation_id: str | None = None,
        action_id: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize UnresolvedReferenceError.

        Args:
            reference: Action id that could not be resolved, or None.
            allocation_id: Allocation holding the reference.
            action_id: Action holding the reference.
            internal_details: Technical details for internal logging only.
        """
        if reference is None:
            user_message = f"Allocation '{allocation_id}' has no resolved target"
        else:
            holder = (
                f"allocation '{allocation_id}'"
                if allocation_id is not None
                else f"action '{action_id}'"
            )
            user_message = (
                f"Unresolved reference to '{reference}' from {holder}: "
                "no earlier creation action has that id"
            )
        super().__init__(user_message, internal_details=internal_details)

        self.reference = reference
        self.allocation_id = allocation_id
        self.action_id = action_id


class SchemaMismatchError(CompilationError):
    """Raised when a record or action does not have the shape it requires.

    Covers an allocation variant missing a required field, duplicate
    allocation ids, and parallel sequences of unequal length or order.

    Attributes:
        subject: Allocation or action identifier.
        expected: Description of the expected shape.
        actual: Description of the actual shape.

    Example:
        >>> raise SchemaMismatchError(
        ...     "token",
        ...     expected="4 owners",
        ...     actual="3 owners",
        ... )
    """

    def __init__(
        self,
        subject: str,
        *,
        expected: str,
        actual: str,
        reason: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize SchemaMismatchError.

        Args:
            subject: Allocation or action identifier.
            expected: Description of the expected shape.
            actual: Description of the actual shape.
            reason: Optional short explanation prefixed to the message.
            internal_details: Technical details for internal logging only.
        """
        prefix = f"{reason}: " if reason else ""
        user_message = (
            f"Schema mismatch in '{subject}': {prefix}expected {expected}, got {actual}"
        )
        super().__init__(user_message, internal_details=internal_details)

        self.subject = subject
        self.expected = expected
        self.actual = actual

    @classmethod
    def for_fields(
        cls,
        subject: str,
        expected: Iterable[str],
        actual: Iterable[str],
        *,
        reason: str | None = None,
    ) -> SchemaMismatchError:
        """Build an error from expected and present field names."""
        return cls(
            subject,
            expected="fields {" + ", ".join(sorted(expected)) + "}",
            actual="fields {" + ", ".join(sorted(actual)) + "}",
            reason=reason,
        )


class InvalidDateError(TokenplanError):
    """Raised when a calendar literal cannot be read as an absolute instant.

    Attributes:
        value: The rejected literal.
    """

    def __init__(self, value: str, *, internal_details: str | None = None) -> None:
        """Initialize InvalidDateError.

        Args:
            value: The rejected literal.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(
            f"Invalid date '{value}': expected an ISO-8601 instant with a UTC offset",
            internal_details=internal_details,
        )
        self.value = value


class DeploymentEnvironmentError(TokenplanError):
    """Raised when a required deployment environment value is missing or invalid.

    Attributes:
        variable: Environment variable name.
    """

    def __init__(
        self,
        variable: str,
        problem: str = "is not set",
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize DeploymentEnvironmentError.

        Args:
            variable: Environment variable name.
            problem: What is wrong with it.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(
            f"Environment variable {variable} {problem}",
            internal_details=internal_details,
        )
        self.variable = variable
