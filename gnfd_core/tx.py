"""
gnfd_core/tx.py — Policy transaction messages and sign documents.

Pipeline: Msg* (validated on construction) → sign_doc() → canonical
bytes → signer → SignedTx → submitter.

Messages are built from already validated chain statements; this module
never sees the string-level policy model.
"""

from datetime import datetime
from typing import ClassVar, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .canonical import canonicalize
from .crypto import sha256_hex
from .permission import ChainStatement, Principal, is_valid_address, is_valid_grn


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

class _PolicyMsg(BaseModel):
    model_config = ConfigDict(frozen=True)

    type_url: ClassVar[str] = ""

    operator: str
    resource: str
    principal: Principal

    @model_validator(mode="after")
    def validate_operator_and_resource(self):
        if not is_valid_address(self.operator):
            raise ValueError(f"invalid operator address: {self.operator!r}")
        if not is_valid_grn(self.resource):
            raise ValueError(f"invalid resource name: {self.resource!r}")
        return self


class MsgPutPolicy(_PolicyMsg):
    """Grant `statements` on `resource` to `principal`."""

    type_url: ClassVar[str] = "/greenfield.storage.MsgPutPolicy"

    statements: List[ChainStatement] = Field(..., min_length=1)
    expiration_time: Optional[datetime] = None


class MsgDeletePolicy(_PolicyMsg):
    """Remove the policy `principal` holds on `resource`."""

    type_url: ClassVar[str] = "/greenfield.storage.MsgDeletePolicy"


PolicyMsg = Union[MsgPutPolicy, MsgDeletePolicy]


# ---------------------------------------------------------------------------
# Sign document
# ---------------------------------------------------------------------------

def sign_doc(
    msg: PolicyMsg,
    chain_id: str,
    account_number: int,
    sequence: int,
    memo: str = "",
) -> bytes:
    """Canonical bytes the operator signs for a single-message tx.

    Account number and sequence are carried as decimal strings, as the
    chain's JSON signing mode does for 64-bit integers.
    """
    if not chain_id:
        raise ValueError("chain_id must not be empty")
    if account_number < 0 or sequence < 0:
        raise ValueError("account_number and sequence must be non-negative")
    doc = {
        "account_number": str(account_number),
        "chain_id": chain_id,
        "memo": memo,
        "msgs": [{
            "type": msg.type_url,
            "value": msg.model_dump(mode="json", exclude_none=True),
        }],
        "sequence": str(sequence),
    }
    return canonicalize(doc)


class SignedTx(BaseModel):
    """A signed, ready-to-submit transaction."""

    model_config = ConfigDict(frozen=True)

    msg_type: str
    sign_doc: str
    signature: str = Field(..., pattern=r"^[0-9a-f]+$")
    public_key: str = Field(..., pattern=r"^[0-9a-f]+$")

    def digest(self) -> str:
        """SHA-256 over the signed document; stable local id of the tx."""
        return sha256_hex(self.sign_doc.encode("utf-8"))
