"""
Repost moderation engine.

For each incoming message the engine decides whether the author is posting
a video they have already posted, keeps the per-user violation count, and
escalates through the escalation policy:

1. Bot authors, direct messages and (when a channel filter is configured)
   other channels are ignored.
2. Messages without a video link are ignored.
3. The author's violation record is created on first sight.
4. Inserting the (user, video) sighting either succeeds, which makes this a
   first sighting, or conflicts, which makes it a repeat offense.
5. Repeat offenses increment the counter, delete the message and apply the
   action for the new count.
6. The ban tier and anything above it reset the counter and forget the video.

The engine holds no locks. Consistency between concurrent messages comes from
the stores (atomic UPDATEs and the UNIQUE sighting constraint). Discord
failures are logged and never roll back state that was already persisted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from repostguard.configuration.app_configuration import ModerationSettings
from repostguard.datatypes.action_datatypes import ActionType, EscalationStep
from repostguard.datatypes.discord_datatypes import UserID
from repostguard.datatypes.moderation_datatypes import IncomingMessage, MessageState, ModerationOutcome
from repostguard.errors import (
    ExternalActionError,
    RepostGuardError,
    SeenLinkConflictError,
    SeenLinkNotFoundError,
    UserNotFoundError,
)
from repostguard.moderation.escalation_policy import EscalationPolicy
from repostguard.moderation.link_extractor import extract_video_id
from repostguard.services.seen_link_store import SeenLinkStore
from repostguard.services.violation_store import ViolationStore
from repostguard.util.discord_utils import ActionExecutor, format_duration
from repostguard.util.logger import get_logger

logger = get_logger("moderation_engine")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ModerationEngine:
    """
    Orchestrates link extraction, the stores, the escalation policy and the
    action executor for one message at a time.

    Attributes:
        settings: Immutable moderation settings the engine was built with.
    """

    def __init__(
        self,
        settings: ModerationSettings,
        violation_store: ViolationStore,
        seen_link_store: SeenLinkStore,
        executor: ActionExecutor,
        policy: EscalationPolicy | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.settings = settings
        self._violations = violation_store
        self._seen_links = seen_link_store
        self._executor = executor
        self._policy = policy or EscalationPolicy(settings)
        self._clock = clock

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def handle_message(self, message: IncomingMessage) -> ModerationOutcome:
        """
        Classify a message and apply any resulting moderation.

        Persistence failures abort processing of this message only and are
        reported through ``ModerationOutcome.error``.

        Args:
            message: The message to inspect.

        Returns:
            ModerationOutcome describing what happened.
        """
        if not self._should_inspect(message):
            return ModerationOutcome.ignored()

        video_id = extract_video_id(message.content)
        if video_id is None:
            return ModerationOutcome.ignored()

        try:
            violations = await self._violations.get_or_create(message.author_id)
        except RepostGuardError as exc:
            logger.error(
                "[ENGINE] Failed to load user %s for message %s (url %s): %s",
                message.author_id, message.message_id, video_id, exc,
            )
            return ModerationOutcome.ignored(video_id=video_id, error=str(exc))

        try:
            await self._seen_links.create(message.author_id, video_id, message.message_id)
        except SeenLinkConflictError:
            return await self._handle_repeat_offense(message, video_id, violations)
        except RepostGuardError as exc:
            logger.error(
                "[ENGINE] Failed to record url %s for user %s (message %s): %s",
                video_id, message.author_id, message.message_id, exc,
            )
            return ModerationOutcome.ignored(video_id=video_id, error=str(exc))

        logger.debug("[ENGINE] First sighting of %s by user %s", video_id, message.author_id)
        return ModerationOutcome(
            state=MessageState.FIRST_SIGHTING,
            video_id=video_id,
            violation_count=violations,
        )

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def _should_inspect(self, message: IncomingMessage) -> bool:
        if message.author_is_bot:
            return False

        if message.guild_id is None:
            logger.debug("[ENGINE] Ignoring direct message %s from %s", message.message_id, message.author_id)
            return False

        if not self.settings.channel_filter_active:
            # Unrestricted mode doubles as channel discovery for operators
            logger.info(
                "[ENGINE] Channel activity: channel_id=%s message=%r",
                message.channel_id, message.content,
            )
            return True

        return message.channel_id == self.settings.target_channel_id

    # ------------------------------------------------------------------
    # Repeat offenses
    # ------------------------------------------------------------------

    async def _handle_repeat_offense(
        self, message: IncomingMessage, video_id: str, previous_violations: int
    ) -> ModerationOutcome:
        outcome = ModerationOutcome(state=MessageState.REPEAT_OFFENSE, video_id=video_id)
        logger.warning(
            "[ENGINE] Duplicate video detected: user=%s url=%s message=%s previous_violations=%s",
            message.author_id, video_id, message.message_id, previous_violations,
        )

        try:
            outcome.violation_count = await self._violations.increment(message.author_id)
        except RepostGuardError as exc:
            logger.error("[ENGINE] Failed to increment violations for user %s (url %s): %s", message.author_id, video_id, exc)
            outcome.error = str(exc)
            return outcome

        outcome.message_deleted = await self._delete_offending_message(message)

        step = self._policy.resolve(outcome.violation_count)
        outcome.action = step.action
        outcome.action_applied = await self._apply_step(step, message)

        if step.resets_counter:
            try:
                await self._reset_tier_cleanup(message.author_id, video_id)
            except RepostGuardError as exc:
                logger.error("[ENGINE] Reset-tier cleanup failed for user %s (url %s): %s", message.author_id, video_id, exc)
                outcome.error = str(exc)
                return outcome
            outcome.counter_reset = True

        return outcome

    async def _delete_offending_message(self, message: IncomingMessage) -> bool:
        """Best-effort removal of the repost; failures are logged and swallowed."""
        try:
            deleted = await self._executor.delete_message(message.channel_id, message.message_id)
        except ExternalActionError as exc:
            logger.error(
                "[ENGINE] Failed to delete message %s in channel %s: %s",
                message.message_id, message.channel_id, exc,
            )
            return False

        if deleted:
            logger.info(
                "[ENGINE] Message deleted: author=%s channel=%s content=%r",
                message.author_id, message.channel_id, message.content,
            )
        return deleted

    async def _apply_step(self, step: EscalationStep, message: IncomingMessage) -> bool:
        """Execute the punitive action of ``step``. Returns True if Discord accepted it."""
        guild_id = message.guild_id
        user_id = message.author_id
        if guild_id is None:
            return False

        try:
            match step.action:
                case ActionType.TIMEOUT:
                    duration = step.timeout_duration or self.settings.timeout_duration
                    until = self._clock() + duration
                    await self._executor.timeout_user(guild_id, user_id, until, step.reason)
                    logger.warning(
                        "[ENGINE] User %s timed out for %s",
                        user_id, format_duration(int(duration.total_seconds())),
                    )
                case ActionType.KICK:
                    await self._executor.kick_user(guild_id, user_id, step.reason)
                    logger.warning("[ENGINE] User %s kicked", user_id)
                case ActionType.BAN:
                    await self._executor.ban_user(guild_id, user_id, step.reason, step.delete_message_days)
                    logger.warning("[ENGINE] User %s banned (ban_days=%s)", user_id, step.delete_message_days)
                case _:
                    return False
        except ExternalActionError as exc:
            logger.error(
                "[ENGINE] Failed to %s user %s in guild %s: %s",
                step.action, user_id, guild_id, exc,
            )
            return False

        return True

    async def _reset_tier_cleanup(self, user_id: UserID, video_id: str) -> None:
        """
        Zero the user's counter and forget the video so it may be posted again.

        Records that are already gone count as clean, which keeps the cleanup
        idempotent when a previous attempt partially applied.

        Raises:
            PersistenceError: Storage failure; the rest of the cleanup is skipped.
        """
        try:
            await self._violations.reset(user_id)
        except UserNotFoundError:
            logger.debug("[ENGINE] No violation record to reset for user %s", user_id)

        try:
            await self._seen_links.delete(video_id)
        except SeenLinkNotFoundError:
            logger.debug("[ENGINE] No seen-link records left for %s", video_id)

        logger.info("[ENGINE] Reset violations for user %s and forgot %s", user_id, video_id)
