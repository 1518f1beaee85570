"""Affirmation source used as filler when no bots are running."""

import logging

import httpx

from ..exceptions import FetchError

logger = logging.getLogger(__name__)


class AffirmationClient:
    """Reads a single affirmation from an unauthenticated JSON endpoint."""

    def __init__(self, http: httpx.AsyncClient, url: str = "https://www.affirmations.dev/"):
        self.http = http
        self.url = url

    async def get_affirmation(self) -> str:
        try:
            response = await self.http.get(self.url)
        except httpx.HTTPError as e:
            raise FetchError("affirmation", f"request failed: {e}") from e

        if response.status_code != 200:
            raise FetchError("affirmation", f"HTTP {response.status_code} - {response.text}")

        try:
            affirmation = response.json()["affirmation"]
        except (ValueError, KeyError, TypeError) as e:
            raise FetchError("affirmation", f"malformed payload: {response.text[:200]}") from e

        if not isinstance(affirmation, str) or not affirmation.strip():
            raise FetchError("affirmation", f"empty affirmation: {affirmation!r}")
        return affirmation.strip()
