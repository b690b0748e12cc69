"""
gnfd_core — Greenfield permission policy model.

Validation, JSON (de)serialization and chain-code translation of
access-control policies, plus the transaction messages that carry them.

__version__ is the SDK version.
"""

__version__ = "0.1.0"

from .errors import (
    PolicyError,
    InvalidEffectError,
    InvalidActionError,
    UnregisteredActionError,
    MalformedInputError,
)
from .permission import (
    ChainActionType,
    ChainEffect,
    ChainStatement,
    Principal,
    PrincipalType,
    bucket_grn,
    object_grn,
    group_grn,
    is_valid_address,
    is_valid_grn,
    new_chain_statement,
    new_principal_with_account,
    new_principal_with_group_id,
)
from .policy import (
    ACTION_REGISTRY,
    Action,
    Effect,
    Policy,
    PolicyBuilder,
    Statement,
    action_to_chain_code,
    deserialize_policy,
    deserialize_statement,
    effect_to_chain_code,
    is_allowed,
    is_valid_action,
    is_valid_effect,
    policy_to_chain,
    serialize_policy,
    serialize_statement,
    statement_to_chain,
    validate_policy,
    validate_statement,
)
from .canonical import canonicalize
from .crypto import (
    sha256_hex,
    generate_keypair,
    sign_bytes,
    verify_signature,
    private_key_from_hex,
    private_key_to_pem,
    private_key_from_pem,
    public_key_to_hex,
    public_key_from_hex,
)
from .tx import MsgDeletePolicy, MsgPutPolicy, SignedTx, sign_doc
