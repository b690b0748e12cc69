#!/usr/bin/env python3
"""
Policy CLI — validate and inspect policy JSON files.

Usage:
    python -m tools.gnfd_policy_cli validate <policy.json>
    python -m tools.gnfd_policy_cli show <policy.json>

Commands:
    validate — Parse and validate; print the canonical wire form
    show     — Render each statement with its chain codes
"""

import argparse
import os
import sys

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gnfd_core.errors import PolicyError
from gnfd_core.policy import (
    Policy,
    action_to_chain_code,
    deserialize_policy,
    effect_to_chain_code,
    serialize_policy,
)


ICONS = {
    "Allow": "✅",
    "Deny": "⛔",
}


# ============================================================
# Commands
# ============================================================

def cmd_validate(policy: Policy) -> None:
    print(f"  ✓ valid policy ({len(policy.statements)} statement(s))")
    print(serialize_policy(policy).decode("utf-8"))


def cmd_show(policy: Policy) -> None:
    """Render the policy in human-readable format."""
    title = f"Policy {policy.id}" if policy.id else "Policy"
    print(f"━━━ {title} ━━━")
    if not policy.statements:
        print("  (no statements: grants nothing)")
        return

    for i, statement in enumerate(policy.statements):
        effect_code = effect_to_chain_code(statement.effect)
        icon = ICONS.get(statement.effect, "📌")
        print(f"\n[{i}] {icon} {statement.effect.upper()} ({effect_code.name})")
        for action in statement.actions:
            code = action_to_chain_code(action)
            print(f"    {action:22s} → {code.name} ({int(code)})")
        if statement.resources:
            for resource in statement.resources:
                print(f"    resource: {resource}")


# ============================================================
# Main
# ============================================================

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Policy CLI — validate and inspect access-control policies",
        prog="python -m tools.gnfd_policy_cli",
    )
    parser.add_argument(
        "command",
        choices=["validate", "show"],
        help="Command: validate (check + print wire form) or show (render)",
    )
    parser.add_argument(
        "policy_file",
        help="Path to policy JSON file",
    )

    args = parser.parse_args(argv)

    if not os.path.exists(args.policy_file):
        print(f"  ERROR: File not found: {args.policy_file}")
        return 1

    with open(args.policy_file, "rb") as f:
        data = f.read()

    try:
        policy = deserialize_policy(data)
    except PolicyError as e:
        print(f"  ✗ INVALID: {e}")
        return 1

    if args.command == "validate":
        cmd_validate(policy)
    elif args.command == "show":
        cmd_show(policy)
    return 0


if __name__ == "__main__":
    sys.exit(main())
