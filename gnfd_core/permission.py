"""
gnfd_core/permission.py — Chain-level permission types.

Mirrors the enumerations and messages understood by the chain's permission
module: numeric action and effect codes, principals (an account or a
group), Greenfield resource names (GRN) and the chain form of a policy
statement.

The string-level policy model in policy.py translates into these types;
nothing here knows about the JSON wire format.
"""

import re
from datetime import datetime
from enum import IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Chain enumerations
# ---------------------------------------------------------------------------

class ChainActionType(IntEnum):
    """Action codes of the chain permission module."""
    ACTION_UNSPECIFIED = 0
    ACTION_UPDATE_BUCKET_INFO = 1
    ACTION_DELETE_BUCKET = 2
    ACTION_CREATE_OBJECT = 3
    ACTION_DELETE_OBJECT = 4
    ACTION_COPY_OBJECT = 5
    ACTION_GET_OBJECT = 6
    ACTION_EXECUTE_OBJECT = 7
    ACTION_LIST_OBJECT = 8
    ACTION_UPDATE_GROUP_MEMBER = 9
    ACTION_DELETE_GROUP = 10
    ACTION_TYPE_ALL = 99


class ChainEffect(IntEnum):
    """Effect codes of the chain permission module."""
    EFFECT_UNSPECIFIED = 0
    EFFECT_ALLOW = 1
    EFFECT_DENY = 2


class PrincipalType(IntEnum):
    PRINCIPAL_TYPE_UNSPECIFIED = 0
    PRINCIPAL_TYPE_GNFD_ACCOUNT = 1
    PRINCIPAL_TYPE_GNFD_GROUP = 2


# ---------------------------------------------------------------------------
# Addresses and resource names
# ---------------------------------------------------------------------------

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_GRN_RE = re.compile(
    r"^grn:(?:b::[^/]+|o::[^/]+/.+|g:0x[0-9a-fA-F]{40}::.+)$"
)


def is_valid_address(address: str) -> bool:
    """True for a 0x-prefixed, 20-byte hex account address."""
    return isinstance(address, str) and bool(_ADDRESS_RE.match(address))


def is_valid_grn(resource: str) -> bool:
    """True for a bucket, object or group GRN."""
    return isinstance(resource, str) and bool(_GRN_RE.match(resource))


def bucket_grn(bucket_name: str) -> str:
    """grn:b::<bucket>"""
    _require_name("bucket_name", bucket_name)
    return f"grn:b::{bucket_name}"


def object_grn(bucket_name: str, object_name: str) -> str:
    """grn:o::<bucket>/<object>. Object names may contain '/'."""
    _require_name("bucket_name", bucket_name)
    if not object_name:
        raise ValueError("object_name must not be empty")
    return f"grn:o::{bucket_name}/{object_name}"


def group_grn(owner_address: str, group_name: str) -> str:
    """grn:g:<owner>::<group>"""
    if not is_valid_address(owner_address):
        raise ValueError(f"invalid owner address: {owner_address!r}")
    if not group_name:
        raise ValueError("group_name must not be empty")
    return f"grn:g:{owner_address}::{group_name}"


def _require_name(field: str, value: str) -> None:
    if not value or "/" in value:
        raise ValueError(f"{field} must be non-empty and must not contain '/'")


# ---------------------------------------------------------------------------
# Principal
# ---------------------------------------------------------------------------

class Principal(BaseModel):
    """The grantee of a policy: an account address or a group id."""

    model_config = ConfigDict(frozen=True)

    type: PrincipalType
    value: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_value_for_type(self) -> "Principal":
        if self.type == PrincipalType.PRINCIPAL_TYPE_GNFD_ACCOUNT:
            if not is_valid_address(self.value):
                raise ValueError(f"invalid account address: {self.value!r}")
        elif self.type == PrincipalType.PRINCIPAL_TYPE_GNFD_GROUP:
            if not self.value.isdigit():
                raise ValueError(f"invalid group id: {self.value!r}")
        else:
            raise ValueError("principal type must be specified")
        return self


def new_principal_with_account(address: str) -> Principal:
    return Principal(type=PrincipalType.PRINCIPAL_TYPE_GNFD_ACCOUNT, value=address)


def new_principal_with_group_id(group_id: int) -> Principal:
    if group_id < 0:
        raise ValueError(f"group id must be non-negative, got {group_id}")
    return Principal(type=PrincipalType.PRINCIPAL_TYPE_GNFD_GROUP, value=str(group_id))


# ---------------------------------------------------------------------------
# Chain statement
# ---------------------------------------------------------------------------

class ChainStatement(BaseModel):
    """A statement in the chain's own representation.

    Unlike policy.Statement this is validated on construction: it is only
    ever produced from an already validated statement.
    """

    model_config = ConfigDict(frozen=True)

    effect: ChainEffect
    actions: List[ChainActionType] = Field(..., min_length=1)
    resources: List[str] = Field(default_factory=list)
    expiration_time: Optional[datetime] = None
    limit_size: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def validate_codes(self) -> "ChainStatement":
        if self.effect == ChainEffect.EFFECT_UNSPECIFIED:
            raise ValueError("chain statement effect must be specified")
        if ChainActionType.ACTION_UNSPECIFIED in self.actions:
            raise ValueError("chain statement actions must be specified")
        return self


def new_chain_statement(
    actions: List[ChainActionType],
    effect: ChainEffect,
    resources: Optional[List[str]] = None,
    expiration_time: Optional[datetime] = None,
    limit_size: int = 0,
) -> ChainStatement:
    """Build a ChainStatement. A limit_size of 0 means no limit."""
    return ChainStatement(
        effect=effect,
        actions=list(actions),
        resources=list(resources or []),
        expiration_time=expiration_time,
        limit_size=limit_size or None,
    )
