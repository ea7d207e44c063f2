"""
Aggregation store backed by a SQL database through SQLAlchemy.
Serves as a local stand-in for the hosted document store; defaults to a SQLite file.
"""

import asyncio  # run blocking session work off the event loop
import threading  # guards lazy engine creation
from pathlib import Path  # SQLite parent directory creation
from typing import List, Optional

from loguru import logger
from sqlalchemy import Integer, String, create_engine, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from .aggregation_store import AggregationStore
from .config import Settings
from .errors import StoreReadError, StoreWriteError
from .models import MovieSummary, SearchCountRecord


class Base(DeclarativeBase):
	pass


class SearchCount(Base):
	__tablename__ = 'search_counts'

	id: Mapped[int] = mapped_column(Integer, primary_key=True)
	search_term: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
	count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
	poster_url: Mapped[str] = mapped_column(String(512), nullable=False, default='')
	movie_id: Mapped[int] = mapped_column(Integer, nullable=False)

	def to_record(self) -> SearchCountRecord:
		return SearchCountRecord(
			search_term=self.search_term,
			count=self.count,
			poster_url=self.poster_url,
			movie_id=self.movie_id,
			record_id=str(self.id),
		)


class SQLStore(AggregationStore):
	"""
	Search counts in a `search_counts` table, one row per distinct term.
	The engine and schema are created on first use, and every session runs in a worker thread
	so a slow database never stalls the event loop.
	"""

	def __init__(self, db_url: str = 'sqlite:///data/search_counts.db', image_base_url: str = 'https://image.tmdb.org/t/p/w500'):
		super().__init__(image_base_url)
		self.db_url = db_url
		self.engine = None  # created by _connect
		self.SessionLocal: Optional[sessionmaker] = None
		self._connect_lock = threading.Lock()

	@classmethod
	def from_settings(cls, settings: Settings) -> 'SQLStore':
		return cls(settings.search_counts_db_url, settings.tmdb_image_base_url)

	def _connect(self) -> sessionmaker:
		"""Create the engine and the table on first use. Raises SQLAlchemyError, ImportError or OSError."""
		with self._connect_lock:
			if self.SessionLocal is not None:
				return self.SessionLocal
			url = make_url(self.db_url)
			connect_args = {}
			if url.get_backend_name() == 'sqlite':
				connect_args['check_same_thread'] = False  # sessions run in worker threads
				if url.database and url.database != ':memory:':
					Path(url.database).parent.mkdir(parents=True, exist_ok=True)
			engine = create_engine(url, connect_args=connect_args)
			Base.metadata.create_all(engine)
			self.engine = engine
			self.SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
			logger.info(f"[SQLStore] Using {url.render_as_string(hide_password=True)}")
			return self.SessionLocal

	def _record_search_sync(self, query: str, top_match: MovieSummary) -> None:
		with self._connect()() as db:
			existing = db.execute(
				select(SearchCount).where(SearchCount.search_term == query)
			).scalar_one_or_none()
			if existing:
				existing.count = existing.count + 1
				logger.debug(f"[SQLStore] '{query}' count -> {existing.count}")
			else:
				db.add(SearchCount(
					search_term=query,
					count=1,
					poster_url=self.poster_url_for(top_match),
					movie_id=top_match.id,
				))
				logger.debug(f"[SQLStore] Created record for '{query}'")
			db.commit()

	def _get_trending_sync(self, limit: int) -> List[SearchCountRecord]:
		with self._connect()() as db:
			rows = db.execute(
				select(SearchCount)
				.where(SearchCount.count >= 1)
				.order_by(SearchCount.count.desc())
				.limit(limit)
			).scalars().all()
			return [row.to_record() for row in rows]

	async def _record_search(self, query: str, top_match: MovieSummary) -> None:
		try:
			await asyncio.to_thread(self._record_search_sync, query, top_match)
		except (SQLAlchemyError, ImportError, OSError) as exc:
			raise StoreWriteError(f"Could not record search '{query}': {exc}") from exc

	async def _get_trending(self, limit: int) -> List[SearchCountRecord]:
		try:
			return await asyncio.to_thread(self._get_trending_sync, limit)
		except (SQLAlchemyError, ImportError, OSError) as exc:
			raise StoreReadError(f"Could not read trending searches: {exc}") from exc

	async def close(self) -> None:
		if self.engine is not None:
			self.engine.dispose()
