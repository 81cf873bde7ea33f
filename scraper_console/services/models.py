from pydantic import BaseModel, Field
from typing import Optional


class SpawnRequest(BaseModel):
    count: int = Field(default=1, ge=1)
    # True: block until the whole batch is done and return its result
    wait: bool = False


class SpawnOutcomeOut(BaseModel):
    ok: bool
    container_id: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


class SpawnResponse(BaseModel):
    ok: bool
    queued: bool = False
    requested: int
    succeeded: Optional[int] = None
    failed: Optional[int] = None
    duration_ms: Optional[int] = None
    error_code: Optional[str] = None
    outcomes: list[SpawnOutcomeOut] = []


class ConsoleResponse(BaseModel):
    loading: bool
    logs: list[str]
    cursor: int
    backend_url: str
    poll_interval_ms: int
