"""
Aggregation store interface.
Tracks "search term -> hit count, representative result" records and lists the most searched terms.
Concrete backends live in appwrite_store.py (hosted document database) and sql_store.py (SQLAlchemy).
"""

from typing import List  # type hints

from .config import Settings
from .models import MovieSummary, SearchCountRecord


class AggregationStore:
	"""
	Base class for search-count stores.

	`record_search` is a read-then-write, not an atomic increment: concurrent writers for the same
	term can under-count. Counts only drive the trending order, so that is tolerated.
	"""

	def __init__(self, image_base_url: str = 'https://image.tmdb.org/t/p/w500'):
		self.image_base_url = image_base_url

	def poster_url_for(self, movie: MovieSummary) -> str:
		return movie.poster_url(self.image_base_url)

	async def record_search(self, query: str, top_match: MovieSummary) -> None:
		"""
		Increment the record for `query`, or create it with count=1 from `top_match`.
		Raises StoreWriteError when the store is unavailable or rejects the write.
		"""
		if not query:
			raise ValueError("record_search requires a non-empty query")
		await self._record_search(query, top_match)

	async def get_trending(self, limit: int = 5) -> List[SearchCountRecord]:
		"""
		Top `limit` records by count, descending. Order among equal counts is up to the store.
		Raises StoreReadError when the store cannot be read.
		"""
		if limit <= 0:
			return []
		records = await self._get_trending(limit)
		return [r for r in records if r.count >= 1][:limit]

	async def close(self) -> None:
		"""Release backend resources; a no-op unless overridden."""

	async def _record_search(self, query: str, top_match: MovieSummary) -> None:
		raise NotImplementedError

	async def _get_trending(self, limit: int) -> List[SearchCountRecord]:
		raise NotImplementedError


def create_store(settings: Settings) -> AggregationStore:
	"""Build the backend named by `settings.store_backend`."""
	# Imported here: both backends import this module
	if settings.store_backend == 'appwrite':
		from .appwrite_store import AppwriteStore
		return AppwriteStore.from_settings(settings)
	if settings.store_backend == 'sql':
		from .sql_store import SQLStore
		return SQLStore.from_settings(settings)
	raise ValueError(f"Unknown store backend: {settings.store_backend!r}")
