"""SQLite storage for the task queue."""
