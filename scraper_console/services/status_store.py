from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, List

DEFAULT_LOG_CAPACITY = 1000


class LogBuffer:
    """Fixed-capacity console log. Oldest lines are evicted first."""

    def __init__(self, capacity: int = DEFAULT_LOG_CAPACITY):
        if capacity < 1:
            raise ValueError(f"log capacity must be >= 1, got {capacity}")
        self._lines: deque[str] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._lines.maxlen

    def append(self, line: str):
        self._lines.append(line)

    def extend(self, lines: Iterable[str]):
        self._lines.extend(lines)

    def snapshot(self) -> List[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


@dataclass
class StatusStore:
    capacity: int = DEFAULT_LOG_CAPACITY
    busy: bool = False      # loading flag: a spawn sequence is in flight
    closed: bool = False    # set on teardown, later writes are dropped
    buffer: LogBuffer = field(init=False)

    def __post_init__(self):
        self.buffer = LogBuffer(self.capacity)

    @property
    def logs(self) -> List[str]:
        return self.buffer.snapshot()

    def set_busy(self, v: bool):
        if self.closed:
            return
        self.busy = v

    def log(self, msg: str):
        if self.closed:
            return
        self.buffer.append(msg)

    def log_many(self, msgs: Iterable[str]):
        if self.closed:
            return
        self.buffer.extend(msgs)

    def close(self):
        self.closed = True
        self.busy = False
