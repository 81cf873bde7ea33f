from typing import Any


class ManagerError(Exception):
    """Transport or HTTP failure talking to the Scraper-Manager."""

    def __init__(self, message: str, status_code: int | None = None, response_body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        # None when the server never answered or sent an empty body
        self.response_body = response_body


class MalformedFeedError(ManagerError):
    """GET /messages answered, but not with {"messages": [...]}."""


class ScraperManagerAdapter:
    base_url: str = ""

    async def fetch_messages(self) -> list:
        """Return the full event feed from index 0 (list of wire dicts)."""
        raise NotImplementedError

    async def spawn(self) -> dict:
        """Ask for one new scraper instance. Returns the response body."""
        raise NotImplementedError

    async def get_status(self) -> dict:
        return {}

    async def aclose(self):
        pass
