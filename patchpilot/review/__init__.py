"""File filtering, review dispatch and the per-event review run."""
