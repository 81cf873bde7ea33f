"""
Turns Scraper-Manager events into console lines.

  hello    -> [ts] Container <id> says: <message>
  complete -> [ts] Container <id> completed with status: <status>
              Result: <pretty JSON>
  other    -> nothing (newer event types are ignored, not rejected)
"""

import json
from typing import Any, List

from scraper_console.orchestrator.contracts import COMPLETE, HELLO, RemoteEvent


def format_result(result: Any) -> str:
    # default=str keeps non-JSON values (should never come off the wire) printable
    return json.dumps(result, indent=2, default=str)


def format_event(event: RemoteEvent) -> List[str]:
    if event.type == HELLO:
        return [f"[{event.timestamp}] Container {event.container_id} says: {event.message}"]
    if event.type == COMPLETE:
        return [
            f"[{event.timestamp}] Container {event.container_id} completed with status: {event.status}",
            f"Result: {format_result(event.result)}",
        ]
    return []


def format_raw_events(raw_events: list) -> List[str]:
    """Format a slice of the wire feed. Non-dict items produce no lines."""
    lines: List[str] = []
    for item in raw_events:
        if not isinstance(item, dict):
            continue
        lines.extend(format_event(RemoteEvent.from_dict(item)))
    return lines
