"""
gnfd_core/policy.py — Policy statement model.

A policy is an ordered list of statements; a statement pairs one effect
(Allow or Deny) with a list of actions drawn from a fixed registry.

Validation is two-phase: models are built freely (only the JSON shape is
checked by pydantic) and the vocabulary is checked at the boundary, i.e.
when serializing, deserializing, building through PolicyBuilder or
translating to chain codes. Nothing that fails validation is ever
serialized, and nothing returned by a deserializer is invalid.

Validation is fail-fast: the first invalid statement is reported, and
within a statement the effect is checked before the actions.

Wire format:
    {"GnfdStatement":[{"Effect":"Allow","Action":["get-object"]}]}
"""

from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import (
    InvalidActionError,
    InvalidEffectError,
    MalformedInputError,
    UnregisteredActionError,
)
from .permission import (
    ChainActionType,
    ChainEffect,
    ChainStatement,
    new_chain_statement,
)


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

class Effect(str, Enum):
    ALLOW = "Allow"
    DENY = "Deny"


class Action(str, Enum):
    """Registered action strings."""
    UPDATE_BUCKET_INFO = "update-bucket-info"
    DELETE_BUCKET = "delete-bucket"
    CREATE_OBJECT = "create-object"
    DELETE_OBJECT = "delete-object"
    COPY_OBJECT = "copy-object"
    GET_OBJECT = "get-object"
    EXECUTE_OBJECT = "execute-object"
    LIST_OBJECT = "list-object"
    UPDATE_GROUP_MEMBER = "update-group-member"
    DELETE_GROUP = "delete-group"


# Read-only after import; safe to share between threads.
ACTION_REGISTRY: Mapping[str, ChainActionType] = MappingProxyType({
    Action.UPDATE_BUCKET_INFO.value: ChainActionType.ACTION_UPDATE_BUCKET_INFO,
    Action.DELETE_BUCKET.value: ChainActionType.ACTION_DELETE_BUCKET,
    Action.CREATE_OBJECT.value: ChainActionType.ACTION_CREATE_OBJECT,
    Action.DELETE_OBJECT.value: ChainActionType.ACTION_DELETE_OBJECT,
    Action.COPY_OBJECT.value: ChainActionType.ACTION_COPY_OBJECT,
    Action.GET_OBJECT.value: ChainActionType.ACTION_GET_OBJECT,
    Action.EXECUTE_OBJECT.value: ChainActionType.ACTION_EXECUTE_OBJECT,
    Action.LIST_OBJECT.value: ChainActionType.ACTION_LIST_OBJECT,
    Action.UPDATE_GROUP_MEMBER.value: ChainActionType.ACTION_UPDATE_GROUP_MEMBER,
    Action.DELETE_GROUP.value: ChainActionType.ACTION_DELETE_GROUP,
})

_VALID_EFFECTS = frozenset(e.value for e in Effect)


def _plain(value: Any) -> Any:
    """Unwrap str enums so models only ever hold plain strings."""
    return value.value if isinstance(value, Enum) else value


def is_valid_effect(effect: Any) -> bool:
    return isinstance(effect, str) and _plain(effect) in _VALID_EFFECTS


def is_valid_action(action: Any) -> bool:
    return isinstance(action, str) and _plain(action) in ACTION_REGISTRY


def is_allowed(effect: Any) -> bool:
    """True only for the Allow effect."""
    return _plain(effect) == Effect.ALLOW.value


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class Statement(BaseModel):
    """One effect applied to a list of actions.

    Duplicate actions are kept and order is preserved for serialization.
    `resources` is optional and omitted from the JSON when unset.
    """

    model_config = ConfigDict(frozen=True, validate_by_name=True, validate_by_alias=True)

    effect: str = Field(..., alias="Effect")
    actions: List[str] = Field(..., alias="Action")
    resources: Optional[List[str]] = Field(default=None, alias="Resource")

    @field_validator("effect", mode="before")
    @classmethod
    def unwrap_effect(cls, v: Any) -> Any:
        return _plain(v)

    @field_validator("actions", mode="before")
    @classmethod
    def unwrap_actions(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [_plain(a) for a in v]
        return v

    def is_allowed(self) -> bool:
        return is_allowed(self.effect)

    def ensure_valid(self) -> None:
        validate_statement(self)

    def to_json(self) -> bytes:
        return serialize_statement(self)

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "Statement":
        return deserialize_statement(data)


class Policy(BaseModel):
    """An ordered list of statements. An empty list grants nothing."""

    model_config = ConfigDict(frozen=True, validate_by_name=True, validate_by_alias=True)

    id: Optional[str] = Field(default=None, alias="ID")
    statements: List[Statement] = Field(..., alias="GnfdStatement")

    def ensure_valid(self) -> None:
        validate_policy(self)

    def to_json(self) -> bytes:
        return serialize_policy(self)

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "Policy":
        return deserialize_policy(data)

    def to_chain(self) -> List[ChainStatement]:
        return policy_to_chain(self)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_statement(statement: Statement) -> None:
    """Raise InvalidEffectError or InvalidActionError if the statement is invalid."""
    if not is_valid_effect(statement.effect):
        raise InvalidEffectError(statement.effect)
    for action in statement.actions:
        if not is_valid_action(action):
            raise InvalidActionError(action)


def validate_policy(policy: Policy) -> None:
    """Validate every statement, stopping at the first failure."""
    for statement in policy.statements:
        validate_statement(statement)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _dump(model: BaseModel) -> bytes:
    return model.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


def serialize_statement(statement: Statement) -> bytes:
    validate_statement(statement)
    return _dump(statement)


def serialize_policy(policy: Policy) -> bytes:
    """Validate, then encode as compact JSON bytes.

    Raises the validation error (and produces nothing) if the policy
    is invalid.
    """
    validate_policy(policy)
    return _dump(policy)


def deserialize_statement(data: Union[str, bytes]) -> Statement:
    try:
        statement = Statement.model_validate_json(data, by_alias=True, by_name=False)
    except ValidationError as e:
        raise MalformedInputError(f"malformed statement: {e}") from e
    validate_statement(statement)
    return statement


def deserialize_policy(data: Union[str, bytes]) -> Policy:
    """Parse and validate a policy.

    Raises:
        MalformedInputError: Not JSON, or not the policy shape.
        InvalidEffectError / InvalidActionError: Parsed but invalid.
    """
    try:
        policy = Policy.model_validate_json(data, by_alias=True, by_name=False)
    except ValidationError as e:
        raise MalformedInputError(f"malformed policy: {e}") from e
    validate_policy(policy)
    return policy


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class PolicyBuilder:
    """Accumulates statements; build() validates and returns the Policy.

    Intermediate states may be invalid. Nothing is checked until build():
    wrong types raise MalformedInputError there, unknown effects or
    actions raise InvalidEffectError / InvalidActionError.
    """

    def __init__(self) -> None:
        self._policy_id: Optional[str] = None
        self._statements: List[dict] = []

    def with_id(self, policy_id: str) -> "PolicyBuilder":
        self._policy_id = policy_id
        return self

    def statement(
        self,
        effect: Union[Effect, str],
        actions: Iterable[Union[Action, str]],
        resources: Optional[Iterable[str]] = None,
    ) -> "PolicyBuilder":
        self._statements.append({
            "effect": effect,
            "actions": list(actions),
            "resources": list(resources) if resources is not None else None,
        })
        return self

    def allow(self, *actions: Union[Action, str], resources=None) -> "PolicyBuilder":
        return self.statement(Effect.ALLOW, actions, resources)

    def deny(self, *actions: Union[Action, str], resources=None) -> "PolicyBuilder":
        return self.statement(Effect.DENY, actions, resources)

    def build(self) -> Policy:
        try:
            policy = Policy(
                id=self._policy_id,
                statements=[Statement(**fields) for fields in self._statements],
            )
        except ValidationError as e:
            raise MalformedInputError(f"malformed policy: {e}") from e
        validate_policy(policy)
        return policy


# ---------------------------------------------------------------------------
# Chain codes
# ---------------------------------------------------------------------------

def action_to_chain_code(action: Union[Action, str]) -> ChainActionType:
    key = _plain(action)
    if not isinstance(key, str) or key not in ACTION_REGISTRY:
        raise UnregisteredActionError(key)
    return ACTION_REGISTRY[key]


def effect_to_chain_code(effect: Union[Effect, str]) -> ChainEffect:
    """Allow -> EFFECT_ALLOW, Deny -> EFFECT_DENY.

    Total over Effect. A plain string outside the two values raises
    InvalidEffectError.
    """
    try:
        effect = Effect(effect)
    except ValueError:
        raise InvalidEffectError(effect) from None
    if effect is Effect.ALLOW:
        return ChainEffect.EFFECT_ALLOW
    return ChainEffect.EFFECT_DENY


def statement_to_chain(
    statement: Statement,
    expiration_time: Optional[datetime] = None,
    limit_size: int = 0,
) -> ChainStatement:
    """Validate a statement and translate it to the chain representation."""
    validate_statement(statement)
    if not statement.actions:
        raise ValueError("statement must list at least one action for the chain")
    return new_chain_statement(
        actions=[action_to_chain_code(a) for a in statement.actions],
        effect=effect_to_chain_code(statement.effect),
        resources=statement.resources,
        expiration_time=expiration_time,
        limit_size=limit_size,
    )


def policy_to_chain(policy: Policy) -> List[ChainStatement]:
    validate_policy(policy)
    return [statement_to_chain(s) for s in policy.statements]
