"""
Escalation policy: violation count to punitive action.

| count | action                         | reset afterwards |
|-------|--------------------------------|------------------|
| <= 0  | none                           | no               |
| 1     | timeout (default 3 hours)      | no               |
| 2     | kick                           | no               |
| 3     | ban (default 7 days history)   | yes              |
| > 3   | none, cleanup only             | yes              |

Counts above the ban tier only occur when a previous cleanup did not fully
apply; resolving them to cleanup keeps the counter from climbing forever.
"""

from __future__ import annotations

from repostguard.configuration.app_configuration import ModerationSettings
from repostguard.datatypes.action_datatypes import ActionType, EscalationStep

TIMEOUT_TIER = 1
KICK_TIER = 2
BAN_TIER = 3


class EscalationPolicy:
    """Pure mapping from a post-increment violation count to an EscalationStep."""

    def __init__(self, settings: ModerationSettings | None = None) -> None:
        self._settings = settings or ModerationSettings()

    def resolve(self, violation_count: int) -> EscalationStep:
        settings = self._settings

        if violation_count <= 0:
            return EscalationStep(violation_count=violation_count, action=ActionType.NULL)

        if violation_count == TIMEOUT_TIER:
            return EscalationStep(
                violation_count=violation_count,
                action=ActionType.TIMEOUT,
                reason=settings.timeout_reason,
                timeout_duration=settings.timeout_duration,
            )

        if violation_count == KICK_TIER:
            return EscalationStep(
                violation_count=violation_count,
                action=ActionType.KICK,
                reason=settings.kick_reason,
            )

        if violation_count == BAN_TIER:
            return EscalationStep(
                violation_count=violation_count,
                action=ActionType.BAN,
                resets_counter=True,
                reason=settings.ban_reason,
                delete_message_days=settings.ban_delete_message_days,
            )

        return EscalationStep(violation_count=violation_count, action=ActionType.NULL, resets_counter=True)
