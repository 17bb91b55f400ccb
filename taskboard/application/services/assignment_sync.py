"""Keeps Task.assignedUser and User.pendingTasks in lockstep.

Both sides of the relation are written from whichever resource changed:
a task write pushes/pulls its id on the assignee's pendingTasks, a user
write claims or releases the tasks named in pendingTasks. Writes are
sequential and not rolled back; SyncJournal records what was applied so a
partial failure can be reconciled from the logs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field

from taskboard.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from taskboard.domain.entities import TaskEntity, UserEntity
from taskboard.domain.exceptions import (
    ResourceNotFoundException,
    TaskAssignmentConflictException,
)
from taskboard.shared.utils.generators import is_valid_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentState:
    """The (assignedUser, completed) pair of a task at one point in time."""

    user: str = ""
    completed: bool = False

    @property
    def pending(self) -> bool:
        return bool(self.user) and not self.completed

    @classmethod
    def of(cls, task: TaskEntity | None) -> AssignmentState:
        if task is None:
            return cls()
        return cls(task.assigned_user, task.completed)


@dataclass(frozen=True)
class PendingDelta:
    """pendingTasks writes needed after a task-side change (at most two)."""

    pull_from: str | None = None
    push_to: str | None = None


def task_delta(before: AssignmentState, after: AssignmentState) -> PendingDelta:
    """Compute which user lists lose or gain the task id."""
    changed = before.user != after.user
    pull_from = None
    push_to = None
    if before.pending and (changed or not after.pending):
        pull_from = before.user
    if after.pending and (changed or not before.pending):
        push_to = after.user
    return PendingDelta(pull_from=pull_from, push_to=push_to)


@dataclass(frozen=True)
class PendingDiff:
    added: list[str]
    removed: list[str]


def dedupe(ids: Sequence[str]) -> list[str]:
    """Drop repeated ids, keeping the first occurrence."""
    return list(dict.fromkeys(ids))


def diff_pending(old: Sequence[str], new: Sequence[str]) -> PendingDiff:
    """Ids added to and removed from a pendingTasks list (order of appearance)."""
    old_set = set(old)
    new_set = set(new)
    return PendingDiff(
        added=[i for i in dedupe(new) if i not in old_set],
        removed=[i for i in dedupe(old) if i not in new_set],
    )


@dataclass
class SyncJournal:
    """Applied steps of one multi-document write."""

    operation: str
    steps: list[str] = field(default_factory=list)

    def record(self, step: str) -> None:
        self.steps.append(step)

    @contextmanager
    def guard(self) -> Iterator[SyncJournal]:
        """Log the partial state at ERROR if a write fails, then re-raise."""
        try:
            yield self
        except Exception:
            if self.steps:
                logger.error(
                    "Partial write during %s; applied steps: %s",
                    self.operation,
                    "; ".join(self.steps),
                )
            raise


class AssignmentSynchronizer:
    """Applies the reciprocal writes for task and user mutations."""

    def __init__(self, task_repo: ITaskRepository, user_repo: IUserRepository) -> None:
        self._task_repo = task_repo
        self._user_repo = user_repo

    async def sync_task(
        self,
        task_id: str,
        before: AssignmentState,
        after: AssignmentState,
        journal: SyncJournal,
    ) -> PendingDelta:
        """Pull/push task_id on the affected users' pendingTasks."""
        delta = task_delta(before, after)
        if delta.pull_from:
            await self._user_repo.remove_pending(delta.pull_from, task_id)
            journal.record(f"pulled task {task_id} from user {delta.pull_from}")
        if delta.push_to:
            await self._user_repo.add_pending(delta.push_to, task_id)
            journal.record(f"pushed task {task_id} to user {delta.push_to}")
        return delta

    async def check_claims(self, user_id: str | None, task_ids: Sequence[str]) -> None:
        """Validate that a user may claim task_ids.

        Raises ResourceNotFoundException for a malformed or missing task id and
        TaskAssignmentConflictException (listing the ids) when any task is
        assigned to a different user. Performs no writes.
        """
        if not task_ids:
            return
        for task_id in task_ids:
            if not is_valid_id(task_id):
                raise ResourceNotFoundException("task", task_id)
        tasks = {t.id: t for t in await self._task_repo.get_many(task_ids)}
        for task_id in task_ids:
            if task_id not in tasks:
                raise ResourceNotFoundException("task", task_id)
        conflicts = [
            task_id
            for task_id in task_ids
            if tasks[task_id].assigned_user and tasks[task_id].assigned_user != user_id
        ]
        if conflicts:
            raise TaskAssignmentConflictException(conflicts)

    async def apply_pending_diff(
        self, user: UserEntity, diff: PendingDiff, journal: SyncJournal
    ) -> None:
        """Release removed tasks and claim added ones for user (claims checked first)."""
        if diff.removed:
            released = await self._task_repo.unassign(diff.removed, user.id)
            journal.record(f"unassigned {released} task(s) from user {user.id}")
        if diff.added:
            claimed = await self._task_repo.claim(diff.added, user.id, user.name)
            journal.record(f"assigned {claimed} task(s) to user {user.id}")

    async def refresh_assignee_name(self, user: UserEntity, journal: SyncJournal) -> None:
        updated = await self._task_repo.rename_assignee(user.id, user.name)
        journal.record(f"renamed assignee on {updated} task(s) for user {user.id}")

    async def release_user(self, user_id: str, journal: SyncJournal) -> int:
        """Unassign every task of a deleted user, completed or not."""
        released = await self._task_repo.unassign_all(user_id)
        journal.record(f"unassigned {released} task(s) from deleted user {user_id}")
        return released
