"""Deployment plan models for tokenplan-core.

Covers: CreateContract and CallContract (discriminated on ``kind``), the
DeploymentPlan that orders them, the OwnershipSlot table behind the token
contract's constructor, and the PlanHandle consumers build on.

Any action argument may be a literal (int, str, bool, list, dict) or an
ActionRef to an earlier action's result.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field

from tokenplan_core.errors import SchemaMismatchError, UnresolvedReferenceError
from tokenplan_core.schemas.allocation import (
    IDENTIFIER_PATTERN,
    ActionRef,
    Target,
)

ACTION_ID_PATTERN = r"^[a-zA-Z][a-zA-Z0-9_]*(\.[a-zA-Z][a-zA-Z0-9_]*)?$"
"""Regex pattern for action ids ("token", "team.set_token")."""


def iter_refs(value: Any) -> Iterator[ActionRef]:
    """Yield every ActionRef nested in ``value``, depth first.

    Serialized refs (``{"kind": "ref", "action_id": ...}``) count too, so a
    plan reloaded from JSON can be verified.
    """
    if isinstance(value, ActionRef):
        yield value
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_refs(item)
    elif isinstance(value, dict):
        if value.get("kind") == "ref" and "action_id" in value:
            yield ActionRef.model_validate(value)
            return
        for item in value.values():
            yield from iter_refs(item)


class CreateContract(BaseModel):
    """Deploy a contract.

    Attributes:
        id: Stable action id; also the id other actions reference.
        contract: Contract (artifact) name.
        args: Constructor arguments.
        after: Extra ordering dependencies beyond refs in ``args``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["create"] = "create"
    id: str = Field(..., pattern=IDENTIFIER_PATTERN)
    contract: str = Field(..., min_length=1)
    args: list[Any] = Field(default_factory=list)
    after: list[str] = Field(default_factory=list)

    def dependencies(self) -> list[str]:
        """Action ids that must run before this one, in first-seen order."""
        ids = [ref.action_id for ref in iter_refs(self.args)] + list(self.after)
        return list(dict.fromkeys(ids))


class CallContract(BaseModel):
    """Call a method on a deployed contract.

    Attributes:
        id: Stable action id.
        target: Contract to call, usually an ActionRef.
        method: Method name.
        args: Call arguments.
        after: Extra ordering dependencies beyond refs in ``target``/``args``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["call"] = "call"
    id: str = Field(..., pattern=ACTION_ID_PATTERN)
    target: Target
    method: str = Field(..., min_length=1)
    args: list[Any] = Field(default_factory=list)
    after: list[str] = Field(default_factory=list)

    def dependencies(self) -> list[str]:
        """Action ids that must run before this one, in first-seen order."""
        ids = [ref.action_id for ref in iter_refs([self.target, self.args])] + list(self.after)
        return list(dict.fromkeys(ids))


Action = Annotated[CreateContract | CallContract, Discriminator("kind")]
"""Deployment action with discriminated union on ``kind``."""


class DeploymentPlan(BaseModel):
    """Totally ordered action list for the execution engine.

    Every dependency of an action appears at a strictly smaller index.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    actions: list[Action] = Field(default_factory=list)

    def action_ids(self) -> list[str]:
        return [action.id for action in self.actions]

    def index_of(self, action_id: str) -> int:
        """Return the list index of ``action_id``.

        Raises:
            KeyError: If no action has that id.
        """
        for index, action in enumerate(self.actions):
            if action.id == action_id:
                return index
        raise KeyError(action_id)

    def creations(self, contract: str | None = None) -> list[CreateContract]:
        """Return creation actions, optionally only those for ``contract``."""
        return [
            a
            for a in self.actions
            if isinstance(a, CreateContract) and (contract is None or a.contract == contract)
        ]

    def calls(self) -> list[CallContract]:
        return [a for a in self.actions if isinstance(a, CallContract)]

    def verify(self) -> None:
        """Check ids are unique and the order is topological.

        Raises:
            SchemaMismatchError: If two actions share an id.
            UnresolvedReferenceError: If an action depends on an id that is
                not created earlier in the list.
        """
        seen: set[str] = set()
        created: set[str] = set()
        for action in self.actions:
            if action.id in seen:
                raise SchemaMismatchError(
                    action.id,
                    expected="unique action id",
                    actual="id used by an earlier action",
                )
            refs = _refs_of(action)
            for dependency in action.dependencies():
                if dependency not in seen:
                    raise UnresolvedReferenceError(dependency, action_id=action.id)
                # Only creations produce a value a ref can point at.
                if dependency in refs and dependency not in created:
                    raise UnresolvedReferenceError(
                        dependency,
                        action_id=action.id,
                        internal_details=f"'{dependency}' is a call; only creations have results",
                    )
            seen.add(action.id)
            if isinstance(action, CreateContract):
                created.add(action.id)


def _refs_of(action: CreateContract | CallContract) -> set[str]:
    if isinstance(action, CallContract):
        return {ref.action_id for ref in iter_refs([action.target, action.args])}
    return {ref.action_id for ref in iter_refs(action.args)}


class OwnershipSlot(BaseModel):
    """One position of the token contract's parallel owner/amount sequences.

    Attributes:
        key: Slot key; an allocation id, or the sale contract action id.
        allocation_ids: Allocations whose tokens this slot carries.
        target: Owner of the slot.
        amount: Base units minted to the owner.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    allocation_ids: list[str] = Field(..., min_length=1)
    target: Target
    amount: int = Field(..., ge=0)


class PlanHandle(BaseModel):
    """Resolved targets consumers build on.

    Attributes:
        targets: Allocation id to its owning contract or address.
        token: Token contract creation.
        sale_contract: Sale contract creation.
        payment_asset: Payment asset (created in development, literal in production).
        vesting: Vesting pool id to its vesting contract creation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    targets: dict[str, Target]
    token: ActionRef
    sale_contract: ActionRef
    payment_asset: Target
    vesting: dict[str, ActionRef] = Field(default_factory=dict)
