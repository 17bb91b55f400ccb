"""Application services: query translation and assignment integrity."""

from taskboard.application.services.assignment_sync import (
    AssignmentState,
    AssignmentSynchronizer,
    PendingDelta,
    PendingDiff,
    SyncJournal,
    dedupe,
    diff_pending,
    task_delta,
)
from taskboard.application.services.query_translator import QueryTranslator

__all__ = [
    "AssignmentState",
    "AssignmentSynchronizer",
    "PendingDelta",
    "PendingDiff",
    "QueryTranslator",
    "SyncJournal",
    "dedupe",
    "diff_pending",
    "task_delta",
]
