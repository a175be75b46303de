"""
HTTP client for the remote trivia service.

The service exposes two read endpoints:

    GET {base}categories?count=N   -> [{"id": ..., ...}, ...]
    GET {base}category?id=ID       -> {"title": str, "clues": [{"question", "answer", ...}]}
"""
import asyncio
import json
import logging
from typing import Any, List, Optional

import aiohttp

from .models import DEFAULT_API_BASE_URL, RawCategory, RawClue


logger = logging.getLogger(__name__)


class TriviaError(Exception):
    """Base exception for failures while setting up a board."""
    pass


class NetworkError(TriviaError):
    """Raised when a request to the trivia service does not succeed."""
    pass


class DataShapeError(TriviaError):
    """Raised when a category response lacks the expected title/clues structure."""
    pass


class TriviaClient:
    """Reads categories and clues from the trivia service."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        request_timeout: float = 10,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize the client.

        Args:
            base_url: Service base address, with or without a trailing slash
            request_timeout: Total time allowed per request, in seconds
            session: Optional pre-built session; the client creates its own otherwise
        """
        self.base_url = base_url if base_url.endswith('/') else base_url + '/'
        self.request_timeout = request_timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "TriviaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.request_timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(self, endpoint: str, params: dict) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"GET {url} {params}")

        try:
            session = self._get_session()
            async with session.get(url, params=params) as response:
                if response.status != 200:
                    raise NetworkError(f"HTTP {response.status} from {url}")
                return await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            logger.error(f"Request to {url} timed out after {self.request_timeout}s")
            raise NetworkError(f"Request to {url} timed out") from e
        except aiohttp.ClientError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise NetworkError(f"Request to {url} failed: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Invalid JSON from {url}: {e}")
            raise NetworkError(f"Invalid JSON from {url}") from e

    async def fetch_category_pool(self, pool_size: int) -> List[Any]:
        """
        Request up to pool_size category identifiers.

        Args:
            pool_size: Number of categories to ask the service for

        Returns:
            List of opaque category identifiers, in service order

        Raises:
            NetworkError: If the request fails or the body is not a list of {id} objects
        """
        data = await self._get_json("categories", {"count": pool_size})

        if not isinstance(data, list):
            raise NetworkError(f"Expected a list of categories, got {type(data).__name__}")

        category_ids = []
        for item in data:
            if not isinstance(item, dict) or 'id' not in item:
                raise NetworkError(f"Malformed category entry: {item!r}")
            category_ids.append(item['id'])

        logger.info(f"Fetched pool of {len(category_ids)} categories")
        return category_ids

    async def fetch_category(self, category_id: Any) -> RawCategory:
        """
        Request the title and full clue list of one category.

        Args:
            category_id: Identifier from fetch_category_pool

        Returns:
            RawCategory with every clue the service returned

        Raises:
            NetworkError: If the request fails
            DataShapeError: If the body lacks a title or a clues list
        """
        data = await self._get_json("category", {"id": category_id})
        category = self.parse_category(data)
        logger.debug(f"Fetched category {category_id} '{category.title}' with {len(category.clues)} clues")
        return category

    @staticmethod
    def parse_category(data: Any) -> RawCategory:
        """Map a category response body onto RawCategory."""
        if not isinstance(data, dict):
            raise DataShapeError(f"Expected a category object, got {type(data).__name__}")

        title = data.get('title')
        if not isinstance(title, str):
            raise DataShapeError("Category response is missing a 'title' string")

        raw_clues = data.get('clues')
        if not isinstance(raw_clues, list):
            raise DataShapeError(f"Category '{title}' is missing a 'clues' list")

        clues = []
        for index, raw_clue in enumerate(raw_clues):
            if not isinstance(raw_clue, dict):
                raise DataShapeError(f"Clue {index} of '{title}' is not an object")
            question = raw_clue.get('question')
            answer = raw_clue.get('answer')
            if not _is_text(question) or not _is_text(answer):
                raise DataShapeError(f"Clue {index} of '{title}' is missing question or answer")
            clues.append(RawClue(question=str(question), answer=str(answer)))

        return RawCategory(title=title, clues=clues)


def _is_text(value: Any) -> bool:
    # Some answers come back as bare numbers
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)
