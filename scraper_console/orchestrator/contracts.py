from dataclasses import dataclass, field
from typing import Any, Optional

HELLO = "hello"
COMPLETE = "complete"


@dataclass
class RemoteEvent:
    timestamp: Optional[str]
    type: Optional[str]           # "hello" | "complete" | anything newer
    container_id: Optional[str]
    message: Optional[str] = None
    status: Optional[str] = None
    result: Any = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "RemoteEvent":
        # Scraper-Manager sends container_id; accept the camelCase spelling too
        cid = data.get("container_id", data.get("containerId"))
        return cls(
            timestamp=data.get("timestamp"),
            type=data.get("type"),
            container_id=cid,
            message=data.get("message"),
            status=data.get("status"),
            result=data.get("result"),
            raw=data,
        )


@dataclass
class SpawnOutcome:
    ok: bool
    container_id: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
    # Parsed server body on HTTP errors (dict/list) or raw text
    response_body: Any = None


@dataclass
class BatchResult:
    ok: bool
    requested: int
    succeeded: int = 0
    failed: int = 0
    duration_ms: int = 0
    error_code: Optional[str] = None
    outcomes: list[SpawnOutcome] = field(default_factory=list)
