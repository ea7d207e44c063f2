"""
Catalog client for The Movie Database (TMDB) v3 API.
Issues read-only queries: text search for a non-empty query, popularity-ranked discovery otherwise.
"""

from typing import Dict, Optional  # type hints
from urllib.parse import quote  # percent-encoding of the query text

import httpx  # async HTTP client
from loguru import logger  # console logger

from .config import Settings
from .errors import FetchError
from .models import CatalogPage, MovieSummary


# Characters encodeURIComponent leaves alone; everything else in the query is percent-encoded
_QUERY_SAFE = "-_.!~*'()"


class CatalogClient:
	"""
	Thin async wrapper around the two catalog endpoints.
	No retries and no caching; the only timeout is the HTTP client's.
	"""

	def __init__(
		self,
		api_key: str,
		base_url: str = 'https://api.themoviedb.org/3',
		timeout: float = 30.0,
		client: Optional[httpx.AsyncClient] = None,
	):
		self.api_key = api_key  # bearer token, checked on first use
		self.base_url = base_url.rstrip('/')
		self.timeout = timeout
		self._client = client  # injected clients are not closed by us
		self._owns_client = client is None

	@classmethod
	def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> 'CatalogClient':
		return cls(settings.tmdb_api_key, settings.tmdb_base_url, settings.http_timeout, client=client)

	@property
	def headers(self) -> Dict[str, str]:
		return {
			'Accept': 'application/json',
			'Authorization': f"Bearer {self.api_key}",
		}

	def build_url(self, query: str) -> str:
		"""Return the exact URL `search(query)` would request."""
		if query:
			return f"{self.base_url}/search/movie?query={quote(query, safe=_QUERY_SAFE)}"
		return f"{self.base_url}/discover/movie?sort_by=popularity.desc"

	def _get_client(self) -> httpx.AsyncClient:
		if self._client is None:
			self._client = httpx.AsyncClient(timeout=self.timeout)
		return self._client

	async def search(self, query: str) -> CatalogPage:
		"""
		Search the catalog (or discover popular movies when `query` is empty).
		Raises FetchError on transport failure, non-success status or an unreadable body.
		A provider-side rejection is not raised; it is reported through `CatalogPage.soft_error`.
		"""
		if not self.api_key:
			raise FetchError("TMDB_API_KEY not set")

		url = self.build_url(query)
		logger.debug(f"[Catalog] GET {url}")
		try:
			response = await self._get_client().get(url, headers=self.headers)
			response.raise_for_status()
			payload = response.json()
		except httpx.HTTPStatusError as exc:
			raise FetchError(f"Catalog responded with HTTP {exc.response.status_code}") from exc
		except httpx.HTTPError as exc:
			raise FetchError(f"Catalog request failed: {exc}") from exc
		except ValueError as exc:  # JSON decoding
			raise FetchError("Catalog returned a body that is not JSON") from exc

		if not isinstance(payload, dict):
			raise FetchError("Catalog returned an unexpected payload shape")

		try:
			results = [MovieSummary.from_payload(item) for item in (payload.get('results') or [])]
		except (ValueError, TypeError, AttributeError) as exc:
			raise FetchError(f"Catalog returned a malformed result: {exc}") from exc
		logger.debug(f"[Catalog] {len(results)} results for query={query!r}")
		return CatalogPage(results=results, payload=payload)

	async def close(self) -> None:
		if self._client is not None and self._owns_client:
			await self._client.aclose()
			self._client = None

	async def __aenter__(self) -> 'CatalogClient':
		return self

	async def __aexit__(self, *exc_info) -> None:
		await self.close()
