"""Collection names and unique fields (schema-in-code).

Document stores have no DDL or migrations. Collections are created
automatically on first write. Use these constants so names stay consistent.

Example:
    store = request.app.state.store
    await store.get(COLLECTION_TASKS, task_id)
"""

COLLECTION_TASKS = "tasks"
COLLECTION_USERS = "users"

# Fields whose values must be unique within a collection.
UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {
    COLLECTION_USERS: ("email",),
}

# Array-valued fields (equality on these means "contains").
ARRAY_FIELDS: dict[str, tuple[str, ...]] = {
    COLLECTION_USERS: ("pendingTasks",),
}
