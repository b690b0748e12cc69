#!/usr/bin/env python3
"""
Put / Delete Policy Demo

Grants a principal read access to a bucket, shows that an invalid policy
is rejected before anything is signed, then deletes the policy.

The submitter here only prints and returns the local tx digest; swap in a
real broadcaster to talk to a chain.

Run:
    python examples/demo_put_policy.py
"""

import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gnfd_client import ClientConfig, LocalKeySigner, PermissionClient
from gnfd_core.crypto import generate_keypair
from gnfd_core.errors import PolicyError
from gnfd_core.permission import new_principal_with_account
from gnfd_core.policy import Action, PolicyBuilder
from gnfd_core.tx import SignedTx


class PrintingSubmitter:
    def submit(self, tx: SignedTx) -> str:
        print(f"    → {tx.msg_type} ({len(tx.sign_doc)} bytes signed)")
        return tx.digest()


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    private_key, _ = generate_keypair()
    config = ClientConfig(
        chain_id="greenfield_9000-121",
        operator_address="0x" + "11" * 20,
    )
    client = PermissionClient(config, LocalKeySigner(private_key), PrintingSubmitter())
    grantee = new_principal_with_account("0x" + "22" * 20)

    policy = PolicyBuilder().allow(Action.GET_OBJECT, Action.LIST_OBJECT).build()
    print("\n[1] Put bucket policy")
    tx_hash = client.put_bucket_policy("demo-bucket", grantee, policy)
    print(f"    tx: {tx_hash}")

    print("\n[2] Invalid policy (nothing is signed)")
    try:
        client.put_bucket_policy(
            "demo-bucket",
            grantee,
            b'{"GnfdStatement":[{"Effect":"Allow","Action":["teleport-object"]}]}',
        )
    except PolicyError as e:
        print(f"    ✗ {e}")

    print("\n[3] Delete bucket policy")
    tx_hash = client.delete_bucket_policy("demo-bucket", grantee)
    print(f"    tx: {tx_hash}")
    print(f"\nNext sequence: {client.sequence}")


if __name__ == "__main__":
    main()
