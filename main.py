"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the event_discovery package.
"""

from event_discovery.main import discover_events

__all__ = [
    "discover_events",
]
