"""
taskquest.exceptions — Error Taxonomy
======================================

None of these ever escape ``GamificationService.on_task_completed``; they
exist so each sub-step can catch exactly the failures it is allowed to
absorb and log them with a precise label.
"""

from __future__ import annotations


class TaskQuestError(Exception):
    """Base class for all TaskQuest errors."""


class NotAuthenticated(TaskQuestError):
    """No resolvable user; the whole operation short-circuits."""


class StoreError(TaskQuestError):
    """The persistence layer failed."""


class StoreReadFailure(StoreError):
    """A store query failed."""


class StoreWriteFailure(StoreError):
    """A store write failed."""


class PredicateEvaluationFailure(TaskQuestError):
    """A badge predicate raised while being evaluated."""

    def __init__(self, badge_id: str, cause: BaseException) -> None:
        super().__init__(f"Predicate for badge {badge_id!r} failed: {cause!r}")
        self.badge_id = badge_id
        self.cause = cause
