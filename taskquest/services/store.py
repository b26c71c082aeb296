"""
taskquest.services.store — Profile & Badge Persistence
=======================================================

:class:`GamificationStore` is the contract the service depends on;
:class:`SqlAlchemyStore` implements it on the ``profiles`` and
``badge_unlocks`` tables.

All methods are synchronous — the service runs them through
:func:`taskquest.database.engine.run_db`.  Any SQLAlchemy failure is
re-raised as :class:`StoreReadFailure` or :class:`StoreWriteFailure` so
callers never need to know about the database driver.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from taskquest.database.engine import get_session
from taskquest.database.models import BadgeUnlockRow, ProfileRow
from taskquest.engine.streak import Profile
from taskquest.exceptions import StoreReadFailure, StoreWriteFailure

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class GamificationStore(Protocol):
    """Persistence operations needed by the gamification service."""

    def get_profile(self, uid: str) -> Profile | None: ...

    def increment_completed_task_count(self, uid: str) -> None: ...

    def set_profile(self, uid: str, *, streak: int, last_task_date: date) -> None: ...

    def has_unlock(self, uid: str, badge_id: str) -> bool: ...

    def create_unlock(
        self, uid: str, badge_id: str, *, name: str, description: str, icon: str,
    ) -> bool: ...

    def list_unlocks(self, uid: str) -> dict[str, datetime | None]: ...


def _to_profile(row: ProfileRow) -> Profile:
    return Profile(
        completed_task_count=row.completed_task_count or 0,
        streak=row.streak or 0,
        last_task_date=row.last_task_date,
        created_at=row.created_at,
    )


class SqlAlchemyStore:
    """:class:`GamificationStore` backed by a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    # -- Profiles -----------------------------------------------------------

    def get_profile(self, uid: str) -> Profile | None:
        try:
            with get_session(self._engine) as session:
                row = session.get(ProfileRow, uid)
                return _to_profile(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise StoreReadFailure(f"get_profile({uid!r}) failed") from exc

    def increment_completed_task_count(self, uid: str) -> None:
        """Atomic ``+1``; creates the profile on first use."""
        try:
            with get_session(self._engine) as session:
                if self._bump_count(session, uid):
                    return
                try:
                    with session.begin_nested():  # SAVEPOINT
                        session.add(ProfileRow(
                            user_id=uid, completed_task_count=1, streak=0,
                        ))
                except IntegrityError:
                    # Another event created the row between our UPDATE and INSERT.
                    self._bump_count(session, uid)
        except SQLAlchemyError as exc:
            raise StoreWriteFailure(
                f"increment_completed_task_count({uid!r}) failed"
            ) from exc

    @staticmethod
    def _bump_count(session: Session, uid: str) -> bool:
        result = session.execute(
            update(ProfileRow)
            .where(ProfileRow.user_id == uid)
            .values(completed_task_count=ProfileRow.completed_task_count + 1)
        )
        return result.rowcount > 0

    def set_profile(self, uid: str, *, streak: int, last_task_date: date) -> None:
        """Merge-write the streak fields without touching the counter."""
        try:
            with get_session(self._engine) as session:
                row = session.get(ProfileRow, uid)
                if row is None:
                    session.add(ProfileRow(
                        user_id=uid,
                        completed_task_count=0,
                        streak=streak,
                        last_task_date=last_task_date,
                    ))
                else:
                    row.streak = streak
                    row.last_task_date = last_task_date
        except SQLAlchemyError as exc:
            raise StoreWriteFailure(f"set_profile({uid!r}) failed") from exc

    # -- Badge unlocks ------------------------------------------------------

    def has_unlock(self, uid: str, badge_id: str) -> bool:
        try:
            with get_session(self._engine) as session:
                return session.get(BadgeUnlockRow, (uid, badge_id)) is not None
        except SQLAlchemyError as exc:
            raise StoreReadFailure(f"has_unlock({uid!r}, {badge_id!r}) failed") from exc

    def create_unlock(
        self, uid: str, badge_id: str, *, name: str, description: str, icon: str,
    ) -> bool:
        """Insert the unlock record.

        Returns ``False`` if the record already existed.  The insert is a
        create, never an upsert, so a racing duplicate changes nothing.
        """
        try:
            with get_session(self._engine) as session:
                session.add(BadgeUnlockRow(
                    user_id=uid,
                    badge_id=badge_id,
                    name=name,
                    description=description,
                    icon=icon,
                ))
                session.flush()
        except IntegrityError:
            logger.debug("Badge %s already recorded for %s", badge_id, uid)
            return False
        except SQLAlchemyError as exc:
            raise StoreWriteFailure(
                f"create_unlock({uid!r}, {badge_id!r}) failed"
            ) from exc
        return True

    def list_unlocks(self, uid: str) -> dict[str, datetime | None]:
        try:
            with get_session(self._engine) as session:
                rows = session.execute(
                    select(BadgeUnlockRow.badge_id, BadgeUnlockRow.unlocked_at)
                    .where(BadgeUnlockRow.user_id == uid)
                ).all()
        except SQLAlchemyError as exc:
            raise StoreReadFailure(f"list_unlocks({uid!r}) failed") from exc
        return {row.badge_id: row.unlocked_at for row in rows}
