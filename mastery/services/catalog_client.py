"""
Client for the remote problem catalog (LeetCode GraphQL).
Fetches one page of problems per call; retry and pacing live in the sync driver.
"""

from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from .. import config
from ..errors import NetworkError, ProtocolError

PROBLEMSET_QUERY = """
  query problemsetQuestionListV2($limit: Int!, $skip: Int!) {
    problemsetQuestionListV2(limit: $limit, skip: $skip) {
      questions {
        title
        titleSlug
        difficulty
        topicTags {
          name
        }
        frontendQuestionId
      }
    }
  }
"""

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Referer": "https://leetcode.com/problems",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}


class CatalogClient:
    """Fetches catalog pages from the remote GraphQL endpoint."""

    def __init__(
        self,
        api_url: str = None,
        timeout: float = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url or config.CATALOG_API_URL
        self.timeout = timeout if timeout is not None else config.CATALOG_TIMEOUT
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(DEFAULT_HEADERS)
        return session

    def close(self) -> None:
        """Release the pooled HTTP connections."""
        self.session.close()

    def fetch_page(self, page_size: int, offset: int) -> List[Dict[str, Any]]:
        """
        Fetch one page of catalog items.

        Args:
            page_size: Number of items to request (positive)
            offset: Number of items to skip (non-negative)

        Returns:
            List of raw items: {title, slug, difficulty, topicTags, frontendId}.
            An empty list means the catalog is exhausted.

        Raises:
            NetworkError: Transport failure, non-2xx status or non-JSON body
            ProtocolError: Error payload or unexpected envelope in the response
        """
        if not isinstance(page_size, int) or page_size <= 0:
            raise ValueError(f"page_size must be a positive integer, got {page_size!r}")
        if not isinstance(offset, int) or offset < 0:
            raise ValueError(f"offset must be a non-negative integer, got {offset!r}")

        logger.debug(f"Fetching catalog page: limit={page_size}, skip={offset}")

        try:
            response = self.session.post(
                self.api_url,
                json={
                    "query": PROBLEMSET_QUERY,
                    "variables": {"limit": page_size, "skip": offset},
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"Error fetching catalog page at offset {offset}: {e}", offset) from e

        if response.status_code != 200:
            raise NetworkError(
                f"Catalog page at offset {offset} returned status {response.status_code}", offset
            )

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(f"Catalog page at offset {offset} is not valid JSON: {e}", offset) from e

        return self._parse_envelope(data, offset)

    def _parse_envelope(self, data: Any, offset: int) -> List[Dict[str, Any]]:
        if not isinstance(data, dict):
            raise ProtocolError(f"Unexpected response type at offset {offset}: {type(data).__name__}", offset)

        if data.get("errors"):
            raise ProtocolError(f"GraphQL error at offset {offset}: {data['errors']}", offset)

        inner = data.get("data")
        payload = inner.get("problemsetQuestionListV2") if isinstance(inner, dict) else None
        if not isinstance(payload, dict) or not isinstance(payload.get("questions"), list):
            raise ProtocolError(f"Response at offset {offset} has no question list", offset)

        questions = payload["questions"]
        if not all(isinstance(q, dict) for q in questions):
            raise ProtocolError(f"Malformed question entry at offset {offset}", offset)

        return [self._to_item(q) for q in questions]

    @staticmethod
    def _to_item(question: Dict[str, Any]) -> Dict[str, Any]:
        tags = question.get("topicTags") or []
        return {
            "title": question.get("title"),
            "slug": question.get("titleSlug"),
            "difficulty": question.get("difficulty"),
            "topicTags": [t.get("name") if isinstance(t, dict) else t for t in tags],
            "frontendId": question.get("frontendQuestionId"),
        }
