"""
Action types and data structures for moderation actions.

ActionType enumerates what the bot can do to an offender; EscalationStep is
what the escalation policy hands back to the moderation engine for a given
violation count.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum


class ActionType(Enum):
    """Enumeration of supported moderation actions."""

    TIMEOUT = "timeout"
    KICK = "kick"
    BAN = "ban"
    DELETE = "delete"
    NULL = "null"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class EscalationStep:
    """Punitive action bound to one violation count.

    Attributes:
        violation_count: The count (after increment) this step was resolved for
        action: Action to apply to the offender, NULL for none
        resets_counter: Whether reset-tier cleanup follows the action
        reason: Audit-log reason passed to Discord
        timeout_duration: Length of the timeout, only set for TIMEOUT
        delete_message_days: Days of message history removed with a BAN
    """
    violation_count: int
    action: ActionType
    resets_counter: bool = False
    reason: str = ""
    timeout_duration: timedelta | None = None
    delete_message_days: int = 0
