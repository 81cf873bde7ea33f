ERR_BUSY = "BUSY"
ERR_INVALID_COUNT = "INVALID_COUNT"
ERR_CLOSED = "CLOSED"
ERR_UNKNOWN = "UNKNOWN"
