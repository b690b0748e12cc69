"""
gnfd_core/errors.py — Typed errors raised by the policy model.

All of these are ordinary validation outcomes: the caller is expected to
catch them and branch. Every class derives from ValueError so callers that
only care about "bad input" can catch that.
"""

from __future__ import annotations


class PolicyError(ValueError):
    """Base class for policy validation and (de)serialization errors."""


class InvalidEffectError(PolicyError):
    """Statement effect is neither "Allow" nor "Deny"."""

    def __init__(self, effect: object) -> None:
        self.effect = effect
        super().__init__(f"invalid effect: {effect!r}")


class InvalidActionError(PolicyError):
    """Action string is not in the registry."""

    def __init__(self, action: object) -> None:
        self.action = action
        super().__init__(f"invalid action: {action!r}")


class UnregisteredActionError(InvalidActionError):
    """Raised by chain-code lookup for an action the registry lacks."""

    def __init__(self, action: object) -> None:
        super().__init__(action)
        self.args = (f"unregistered action: {action!r}",)


class MalformedInputError(PolicyError):
    """Bytes do not parse as the expected JSON shape."""
