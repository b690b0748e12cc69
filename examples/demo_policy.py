#!/usr/bin/env python3
"""
Policy Model Demo

Flow:
  1. Build a policy with PolicyBuilder (validated at build())
  2. Serialize it to the wire form
  3. Deserialize it back and compare
  4. Show that invalid input is rejected in both directions
  5. Translate the policy to chain statements

Run:
    python examples/demo_policy.py
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gnfd_core.errors import PolicyError
from gnfd_core.policy import (
    Action,
    Effect,
    Policy,
    PolicyBuilder,
    Statement,
    deserialize_policy,
    serialize_policy,
    serialize_statement,
)


def main():
    print("=" * 72)
    print("  Policy Model Demo")
    print("=" * 72)

    # 1. Build
    policy = (
        PolicyBuilder()
        .allow(Action.GET_OBJECT, Action.LIST_OBJECT)
        .deny(Action.DELETE_BUCKET)
        .build()
    )

    # 2. Serialize
    wire = serialize_policy(policy)
    print(f"\n[1] Wire form:\n    {wire.decode('utf-8')}")

    # 3. Round trip
    restored = deserialize_policy(wire)
    print(f"\n[2] Round trip equal: {restored == policy}")

    # 4. Rejections
    print("\n[3] Invalid input:")
    bad_inputs = [
        b'{"GnfdStatement":[{"Effect":"Maybe","Action":["get-object"]}]}',
        b'{"GnfdStatement":[{"Effect":"Allow","Action":["teleport-object"]}]}',
        b'{"GnfdStatement": not json',
    ]
    for data in bad_inputs:
        try:
            deserialize_policy(data)
        except PolicyError as e:
            print(f"    ✗ {type(e).__name__}: {str(e)[:60]}")

    draft = Statement(effect="Allow", actions=["get-object", "fly-object"])
    try:
        serialize_statement(draft)
    except PolicyError as e:
        print(f"    ✗ not serialized: {e}")

    # 5. Chain form
    print("\n[4] Chain statements:")
    for cs in policy.to_chain():
        print(f"    {cs.effect.name}: {[a.name for a in cs.actions]}")

    empty = Policy(statements=[])
    print(f"\n[5] Empty policy: {serialize_policy(empty).decode('utf-8')}")
    print(f"    Allow is allowed: {Statement(effect=Effect.ALLOW, actions=[]).is_allowed()}")


if __name__ == "__main__":
    main()
