"""
Aggregation store backed by an Appwrite document collection, spoken to over its REST API.
Documents carry `searchTerm`, `count`, `poster_url` and `movie_id`.
"""

import json  # Appwrite query serialization
from typing import Any, Dict, List, Optional

import httpx  # async HTTP client
from loguru import logger

from .aggregation_store import AggregationStore
from .config import Settings
from .errors import StoreReadError, StoreWriteError
from .models import MovieSummary, SearchCountRecord


def _query(method: str, attribute: Optional[str] = None, values: Optional[list] = None) -> str:
	"""Serialize one Appwrite query, e.g. {"method": "equal", "attribute": "searchTerm", "values": ["dune"]}."""
	q: Dict[str, Any] = {'method': method}
	if attribute is not None:
		q['attribute'] = attribute
	if values is not None:
		q['values'] = values
	return json.dumps(q)


class AppwriteStore(AggregationStore):
	"""Search counts stored in a hosted Appwrite database."""

	def __init__(
		self,
		endpoint: str,
		project_id: str,
		database_id: str,
		collection_id: str,
		api_key: str = '',
		image_base_url: str = 'https://image.tmdb.org/t/p/w500',
		timeout: float = 30.0,
		client: Optional[httpx.AsyncClient] = None,
	):
		super().__init__(image_base_url)
		self.endpoint = endpoint.rstrip('/')
		self.project_id = project_id
		self.database_id = database_id
		self.collection_id = collection_id
		self.api_key = api_key
		self.timeout = timeout
		self._client = client
		self._owns_client = client is None

	@classmethod
	def from_settings(cls, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> 'AppwriteStore':
		return cls(
			endpoint=settings.appwrite_endpoint,
			project_id=settings.appwrite_project_id,
			database_id=settings.appwrite_database_id,
			collection_id=settings.appwrite_collection_id,
			api_key=settings.appwrite_api_key,
			image_base_url=settings.tmdb_image_base_url,
			timeout=settings.http_timeout,
			client=client,
		)

	@property
	def documents_url(self) -> str:
		return f"{self.endpoint}/databases/{self.database_id}/collections/{self.collection_id}/documents"

	@property
	def headers(self) -> Dict[str, str]:
		headers = {'X-Appwrite-Project': self.project_id, 'Content-Type': 'application/json'}
		if self.api_key:
			headers['X-Appwrite-Key'] = self.api_key
		return headers

	def _configured(self) -> bool:
		return bool(self.project_id and self.database_id and self.collection_id)

	def _get_client(self) -> httpx.AsyncClient:
		if self._client is None:
			self._client = httpx.AsyncClient(timeout=self.timeout)
		return self._client

	async def _list_documents(self, queries: List[str]) -> List[Dict[str, Any]]:
		params = [('queries[]', q) for q in queries]
		response = await self._get_client().get(self.documents_url, params=params, headers=self.headers)
		response.raise_for_status()
		payload = response.json()
		if not isinstance(payload, dict) or not isinstance(payload.get('documents', []), list):
			raise ValueError('documents response is not an object with a documents list')
		return payload.get('documents', [])

	async def _record_search(self, query: str, top_match: MovieSummary) -> None:
		if not self._configured():
			raise StoreWriteError("Appwrite project, database or collection id not set")
		try:
			documents = await self._list_documents([_query('equal', 'searchTerm', [query])])
			client = self._get_client()
			if documents:
				doc = documents[0]
				new_count = int(doc.get('count', 0)) + 1
				response = await client.patch(
					f"{self.documents_url}/{doc['$id']}",
					json={'data': {'count': new_count}},
					headers=self.headers,
				)
				logger.debug(f"[Appwrite] '{query}' count -> {new_count}")
			else:
				response = await client.post(
					self.documents_url,
					json={
						'documentId': 'unique()',
						'data': {
							'searchTerm': query,
							'count': 1,
							'movie_id': top_match.id,
							'poster_url': self.poster_url_for(top_match),
						},
					},
					headers=self.headers,
				)
				logger.debug(f"[Appwrite] Created record for '{query}'")
			response.raise_for_status()
		except httpx.HTTPError as exc:
			raise StoreWriteError(f"Appwrite write failed for '{query}': {exc}") from exc
		except (ValueError, KeyError, TypeError, AttributeError) as exc:
			raise StoreWriteError(f"Appwrite returned an unexpected response: {exc}") from exc

	async def _get_trending(self, limit: int) -> List[SearchCountRecord]:
		if not self._configured():
			raise StoreReadError("Appwrite project, database or collection id not set")
		try:
			documents = await self._list_documents([
				_query('limit', values=[limit]),
				_query('orderDesc', 'count'),
			])
			return [
				SearchCountRecord(
					search_term=doc['searchTerm'],
					count=int(doc.get('count', 0)),
					poster_url=doc.get('poster_url', ''),
					movie_id=doc.get('movie_id'),
					record_id=doc.get('$id'),
				)
				for doc in documents
			]
		except httpx.HTTPError as exc:
			raise StoreReadError(f"Appwrite read failed: {exc}") from exc
		except (ValueError, KeyError, TypeError, AttributeError) as exc:
			raise StoreReadError(f"Appwrite returned an unexpected response: {exc}") from exc

	async def close(self) -> None:
		if self._client is not None and self._owns_client:
			await self._client.aclose()
			self._client = None
