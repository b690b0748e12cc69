"""
gnfd_client — Permission client.

Turns access-control policies into signed put-policy / delete-policy
transactions and hands them to a submitter:

    Policy → validate → chain statements → Msg → sign doc → sign → submit

Signing and submission are injected capabilities (`Signer`, `Submitter`);
this module performs no network I/O of its own. A policy is fully
validated before anything is signed, so an invalid policy never costs a
round trip.

Sequence numbers are tracked locally per client and advance only after the
submitter accepts a transaction.
"""

import logging
import os
from datetime import datetime
from typing import Optional, Protocol, Union

from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel, Field, field_validator

from gnfd_core.crypto import public_key_to_hex, sign_bytes
from gnfd_core.permission import (
    Principal,
    bucket_grn,
    group_grn,
    is_valid_address,
    object_grn,
)
from gnfd_core.policy import Policy, deserialize_policy, policy_to_chain
from gnfd_core.tx import MsgDeletePolicy, MsgPutPolicy, PolicyMsg, SignedTx, sign_doc


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

class Signer(Protocol):
    public_key_hex: str

    def sign(self, payload: bytes) -> str:
        """Return a hex-encoded signature over payload."""
        ...


class Submitter(Protocol):
    def submit(self, tx: SignedTx) -> str:
        """Broadcast tx and return its hash."""
        ...


class LocalKeySigner:
    """Signer backed by an in-memory secp256k1 key."""

    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        self._private_key = private_key
        self.public_key_hex = public_key_to_hex(private_key.public_key())

    def sign(self, payload: bytes) -> str:
        return sign_bytes(self._private_key, payload)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ClientConfig(BaseModel):
    """Chain identity of the operator account."""

    chain_id: str = Field(..., min_length=1)
    operator_address: str
    account_number: int = Field(default=0, ge=0)
    start_sequence: int = Field(default=0, ge=0)

    @field_validator("operator_address")
    @classmethod
    def validate_operator_address(cls, v: str) -> str:
        if not is_valid_address(v):
            raise ValueError(f"invalid operator address: {v!r}")
        return v

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ClientConfig":
        """Read GNFD_CHAIN_ID, GNFD_OPERATOR_ADDRESS, GNFD_ACCOUNT_NUMBER
        and GNFD_SEQUENCE. The first two are required."""
        env = os.environ if environ is None else environ
        missing = [k for k in ("GNFD_CHAIN_ID", "GNFD_OPERATOR_ADDRESS") if not env.get(k)]
        if missing:
            raise ValueError(f"missing required environment variables: {', '.join(missing)}")
        return cls(
            chain_id=env["GNFD_CHAIN_ID"],
            operator_address=env["GNFD_OPERATOR_ADDRESS"],
            account_number=int(env.get("GNFD_ACCOUNT_NUMBER", "0")),
            start_sequence=int(env.get("GNFD_SEQUENCE", "0")),
        )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

PolicyInput = Union[Policy, str, bytes]


class PermissionClient:
    """Put and delete bucket, object and group policies.

    Args:
        config:    Operator chain identity.
        signer:    Signs canonical sign-doc bytes.
        submitter: Broadcasts signed transactions.
    """

    def __init__(self, config: ClientConfig, signer: Signer, submitter: Submitter) -> None:
        self.config = config
        self.signer = signer
        self.submitter = submitter
        self._sequence = config.start_sequence

    @property
    def sequence(self) -> int:
        """Sequence number the next transaction will be signed with."""
        return self._sequence

    # ------------------------------------------------------------------
    # Put
    # ------------------------------------------------------------------

    def put_bucket_policy(
        self,
        bucket_name: str,
        principal: Principal,
        policy: PolicyInput,
        expiration_time: Optional[datetime] = None,
    ) -> str:
        return self._put_policy(bucket_grn(bucket_name), principal, policy, expiration_time)

    def put_object_policy(
        self,
        bucket_name: str,
        object_name: str,
        principal: Principal,
        policy: PolicyInput,
        expiration_time: Optional[datetime] = None,
    ) -> str:
        return self._put_policy(
            object_grn(bucket_name, object_name), principal, policy, expiration_time
        )

    def put_group_policy(
        self,
        group_name: str,
        principal: Principal,
        policy: PolicyInput,
        expiration_time: Optional[datetime] = None,
    ) -> str:
        """Groups are addressed under the operator as owner."""
        resource = group_grn(self.config.operator_address, group_name)
        return self._put_policy(resource, principal, policy, expiration_time)

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_bucket_policy(self, bucket_name: str, principal: Principal) -> str:
        return self._delete_policy(bucket_grn(bucket_name), principal)

    def delete_object_policy(self, bucket_name: str, object_name: str, principal: Principal) -> str:
        return self._delete_policy(object_grn(bucket_name, object_name), principal)

    def delete_group_policy(self, group_name: str, principal: Principal) -> str:
        return self._delete_policy(
            group_grn(self.config.operator_address, group_name), principal
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _put_policy(
        self,
        resource: str,
        principal: Principal,
        policy: PolicyInput,
        expiration_time: Optional[datetime],
    ) -> str:
        if isinstance(policy, (str, bytes)):
            policy = deserialize_policy(policy)
        statements = policy_to_chain(policy)
        if not statements:
            raise ValueError(
                "policy has no statements; delete the policy instead of putting an empty one"
            )
        msg = MsgPutPolicy(
            operator=self.config.operator_address,
            resource=resource,
            principal=principal,
            statements=statements,
            expiration_time=expiration_time,
        )
        return self._broadcast(msg)

    def _delete_policy(self, resource: str, principal: Principal) -> str:
        msg = MsgDeletePolicy(
            operator=self.config.operator_address,
            resource=resource,
            principal=principal,
        )
        return self._broadcast(msg)

    def _broadcast(self, msg: PolicyMsg) -> str:
        doc = sign_doc(
            msg,
            chain_id=self.config.chain_id,
            account_number=self.config.account_number,
            sequence=self._sequence,
        )
        logger.debug("signing %s for %s (sequence %d)", msg.type_url, msg.resource, self._sequence)
        tx = SignedTx(
            msg_type=msg.type_url,
            sign_doc=doc.decode("utf-8"),
            signature=self.signer.sign(doc),
            public_key=self.signer.public_key_hex,
        )
        tx_hash = self.submitter.submit(tx)
        self._sequence += 1
        logger.info("submitted %s for %s: %s", msg.type_url, msg.resource, tx_hash)
        return tx_hash
