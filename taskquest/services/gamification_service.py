"""
taskquest.services.gamification_service — Completion Pipeline & Reads
======================================================================

Runs one completion event through the full pipeline:

1. Resolve the user (short-circuits with no effects when there is none)
2. Atomically bump ``completed_task_count``
3. Advance the daily streak
4. Evaluate every badge the user doesn't hold yet and record new unlocks

Each step contains its own failures: a store fault is logged and the next
step runs with whatever state is available.  Nothing raised inside the
pipeline ever reaches the caller of :meth:`GamificationService.on_task_completed`.
Reads degrade to the empty profile / all-locked badges instead of failing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from taskquest.config import TaskQuestConfig
from taskquest.database.engine import run_db
from taskquest.engine.badges import (
    BADGE_CATALOG,
    BadgeContext,
    BadgeDefinition,
    BadgeStatus,
    build_context,
    decorate_badges,
    evaluate_badge,
)
from taskquest.engine.streak import Profile, advance
from taskquest.exceptions import (
    NotAuthenticated,
    PredicateEvaluationFailure,
    StoreError,
)

if TYPE_CHECKING:
    from taskquest.services.store import GamificationStore

logger = logging.getLogger(__name__)

IdentityProvider = Callable[[], str | None]


def static_identity(uid: str | None) -> IdentityProvider:
    """Identity provider that always resolves to *uid*."""
    return lambda: uid


class GamificationService:
    """Streak and badge bookkeeping for the user resolved by *identity*."""

    def __init__(
        self,
        store: GamificationStore,
        identity: IdentityProvider,
        config: TaskQuestConfig | None = None,
        catalog: Sequence[BadgeDefinition] = BADGE_CATALOG,
    ) -> None:
        self._store = store
        self._identity = identity
        self._config = config or TaskQuestConfig()
        self._tz = self._config.tz
        self._catalog = tuple(catalog)

    def _require_uid(self) -> str:
        try:
            uid = self._identity()
        except Exception as exc:
            logger.warning("Identity provider failed", exc_info=True)
            raise NotAuthenticated("Identity provider failed") from exc
        if not uid:
            raise NotAuthenticated("No signed-in user")
        return uid

    # -----------------------------------------------------------------------
    # Write path
    # -----------------------------------------------------------------------
    async def on_task_completed(
        self,
        completed_at: datetime,
        total_tasks_today: int,
    ) -> None:
        """Record one completed task.  Never raises."""
        try:
            uid = self._require_uid()
        except NotAuthenticated:
            logger.warning("Task completion ignored: no authenticated user")
            return

        try:
            try:
                await run_db(self._store.increment_completed_task_count, uid)
            except StoreError:
                logger.warning(
                    "Error updating completed_task_count for %s", uid, exc_info=True,
                )

            profile = await self._update_streak(uid, completed_at)
            if profile is None:
                logger.warning("Skipping badge check for %s: profile unavailable", uid)
                return

            ctx = build_context(
                profile,
                completed_at,
                total_tasks_today,
                tz=self._tz,
                morning_start_hour=self._config.morning_start_hour,
                morning_end_hour=self._config.morning_end_hour,
            )
            unlocked = await self.evaluate_and_unlock(uid, ctx)
            if unlocked:
                logger.info("User %s unlocked: %s", uid, ", ".join(sorted(unlocked)))
        except Exception:
            # Completion must never fail for the caller.
            logger.exception("Task completion pipeline failed for %s", uid)

    async def _update_streak(self, uid: str, completed_at: datetime) -> Profile | None:
        """Advance the streak and persist it.

        Returns the advanced profile, or ``None`` if it could not be read.
        A failed write still returns the advanced profile so badge checks
        see the state the event should have produced.
        """
        try:
            stored = await run_db(self._store.get_profile, uid)
        except StoreError:
            logger.warning("Error reading profile for %s", uid, exc_info=True)
            return None

        before = stored or Profile()
        after = advance(before, completed_at, self._tz)

        try:
            await run_db(
                self._store.set_profile,
                uid,
                streak=after.streak,
                last_task_date=after.last_task_date,
            )
        except StoreError:
            logger.warning("Error updating streak for %s", uid, exc_info=True)

        logger.debug(
            "Streak for %s: %d → %d (last %s → %s)",
            uid, before.streak, after.streak,
            before.last_task_date, after.last_task_date,
        )
        return after

    async def evaluate_and_unlock(self, uid: str, ctx: BadgeContext) -> set[str]:
        """Award every catalog badge *ctx* satisfies that *uid* lacks.

        A badge with an unlock record is skipped without evaluating it.  A
        failure on one badge (lookup, predicate, or write) is logged and
        the loop moves on.  Returns only the ids written by this call.
        """
        newly_unlocked: set[str] = set()

        for badge in self._catalog:
            try:
                if await run_db(self._store.has_unlock, uid, badge.id):
                    logger.debug("Badge %s already unlocked for %s", badge.id, uid)
                    continue
            except StoreError:
                logger.warning(
                    "Error checking badge %s for %s", badge.id, uid, exc_info=True,
                )
                continue

            try:
                satisfied = evaluate_badge(badge, ctx)
            except PredicateEvaluationFailure as exc:
                logger.warning("%s; treating as not unlocked", exc)
                continue

            if not satisfied:
                continue

            try:
                created = await run_db(
                    self._store.create_unlock,
                    uid,
                    badge.id,
                    name=badge.name,
                    description=badge.description,
                    icon=badge.icon,
                )
            except StoreError:
                logger.warning(
                    "Error writing badge %s for %s", badge.id, uid, exc_info=True,
                )
                continue

            if created:
                newly_unlocked.add(badge.id)
                logger.info("Badge unlocked: %s (%s) for %s", badge.id, badge.name, uid)

        return newly_unlocked

    # -----------------------------------------------------------------------
    # Read path
    # -----------------------------------------------------------------------
    async def fetch_profile(self) -> Profile:
        """The signed-in user's profile, or an empty one."""
        try:
            uid = self._require_uid()
        except NotAuthenticated:
            return Profile()

        try:
            profile = await run_db(self._store.get_profile, uid)
        except StoreError:
            logger.warning("Error fetching profile for %s", uid, exc_info=True)
            return Profile()
        return profile or Profile()

    async def fetch_badges(self) -> list[BadgeStatus]:
        """Every catalog badge with the signed-in user's unlock state.

        Empty when nobody is signed in.
        """
        try:
            uid = self._require_uid()
        except NotAuthenticated:
            return []
        return await self.list_badges(uid)

    async def list_badges(self, uid: str) -> list[BadgeStatus]:
        """Every catalog badge decorated for *uid*; all locked on failure."""
        try:
            unlocks = await run_db(self._store.list_unlocks, uid)
        except StoreError:
            logger.warning("Error fetching badges for %s", uid, exc_info=True)
            unlocks = {}
        return decorate_badges(unlocks, self._catalog)
