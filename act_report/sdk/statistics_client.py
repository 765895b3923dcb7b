"""
Partner billing API client.

Fetches per-server usage statistics. Failures are loud: any network,
HTTP or payload problem raises FetchError and aborts the run.
"""

import logging
from typing import List, Optional

import requests

from ..core.errors import ConfigurationError, FetchError
from ..core.usage import RawUsageEntry, parse_raw_entry

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://partners.cloud.vkplay.ru/api/v1"


class StatisticsClient:
    """Reads server statistics with a bearer token."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None
    ):
        """Initialize the client.

        Args:
            token: Bearer token for the partner API (required)
            base_url: API root, without trailing slash
            session: Optional requests session to reuse

        Raises:
            ConfigurationError: If the token is missing/empty
        """
        if not token or not token.strip():
            raise ConfigurationError("BEARER_TOKEN is not defined in the environment variables")

        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def fetch_statistics(self, date_str: str) -> List[RawUsageEntry]:
        """Fetch usage statistics for a date.

        Args:
            date_str: Date in YYYY-MM-DD format

        Returns:
            Entries in the order the API returned them

        Raises:
            FetchError: On network errors, non-2xx responses or a body that is not a JSON list
            MalformedEntry: If an element of the list is not an object
        """
        url = f"{self.base_url}/servers/statistic"
        logger.debug("GET %s?date=%s", url, date_str)

        try:
            response = self.session.get(url, params={"date": date_str})
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}") from e

        if not response.ok:
            raise FetchError(
                f"Statistics request failed with HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"Statistics response is not valid JSON: {e}") from e

        if not isinstance(payload, list):
            raise FetchError(f"Statistics response must be a list, got {type(payload).__name__}")

        return [parse_raw_entry(item) for item in payload]
