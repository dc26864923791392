"""Background worker that executes queued analysis tasks one claim at a time."""

__version__ = "0.1.0"
