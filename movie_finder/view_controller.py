"""
View controller.
Owns the page state, reacts to settled queries by calling the catalog, records successful searches
in the aggregation store, and loads the trending list once at startup.

All state changes go through `reduce`, a pure function of (state, event).
"""

import asyncio
import itertools
from dataclasses import dataclass, replace
from typing import Callable, Optional, Set, Tuple, Union

from loguru import logger

from .aggregation_store import AggregationStore
from .catalog_client import CatalogClient
from .debouncer import Debouncer
from .errors import FetchError, StoreError
from .models import MovieSummary, RenderMode, SearchCountRecord, UIState


GENERIC_FETCH_ERROR = 'Error fetching movies. Please try again later.'


# Events understood by the reducer
@dataclass(frozen=True)
class InputChanged:
	value: str


@dataclass(frozen=True)
class QuerySettled:
	query: str


@dataclass(frozen=True)
class SearchStarted:
	seq: int


@dataclass(frozen=True)
class SearchSucceeded:
	seq: int
	results: Tuple[MovieSummary, ...]


@dataclass(frozen=True)
class SearchSoftFailed:
	seq: int
	message: str


@dataclass(frozen=True)
class SearchFailed:
	seq: int


@dataclass(frozen=True)
class TrendingLoaded:
	records: Tuple[SearchCountRecord, ...]


Event = Union[
	InputChanged, QuerySettled, SearchStarted, SearchSucceeded,
	SearchSoftFailed, SearchFailed, TrendingLoaded,
]


def reduce(state: UIState, event: Event) -> UIState:
	"""
	Apply one event to the state and return the new state.
	Completion events for any search other than the latest issued one are dropped, so a slow
	response can never overwrite the results of a newer query.
	"""
	if isinstance(event, InputChanged):
		return replace(state, input_value=event.value)
	if isinstance(event, QuerySettled):
		return replace(state, debounced_query=event.query)
	if isinstance(event, SearchStarted):
		return replace(state, latest_request=event.seq, is_loading=True, error_message='')
	if isinstance(event, TrendingLoaded):
		return replace(state, trending=tuple(event.records))

	if isinstance(event, (SearchSucceeded, SearchSoftFailed, SearchFailed)):
		if event.seq != state.latest_request:
			return state  # stale
		if isinstance(event, SearchSucceeded):
			return replace(state, results=tuple(event.results), error_message='', is_loading=False)
		if isinstance(event, SearchSoftFailed):
			return replace(state, results=(), error_message=event.message, is_loading=False)
		return replace(state, results=(), error_message=GENERIC_FETCH_ERROR, is_loading=False)

	raise TypeError(f"Unknown event: {event!r}")


def render_mode(state: UIState) -> RenderMode:
	"""Loading wins over an error, an error wins over the (possibly empty) result list."""
	if state.is_loading:
		return RenderMode.LOADING
	if state.error_message:
		return RenderMode.ERROR
	return RenderMode.RESULTS


class ViewController:
	"""
	Orchestrates the catalog client and the aggregation store for one browsing session.
	Must be driven from a single asyncio event loop.
	"""

	def __init__(
		self,
		catalog: CatalogClient,
		store: AggregationStore,
		debounce_ms: int = 500,
		trending_limit: int = 5,
		on_change: Optional[Callable[[UIState], None]] = None,
	):
		self.catalog = catalog
		self.store = store
		self.trending_limit = trending_limit
		self.on_change = on_change  # called with every new state
		self.state = UIState()
		self._debouncer = Debouncer(debounce_ms, on_settle=self._on_settle)
		self._seq = itertools.count(1)  # search sequence numbers
		# Strong references to fire-and-forget tasks until they finish
		self._searches: Set[asyncio.Task] = set()
		self._background: Set[asyncio.Task] = set()

	@property
	def render_mode(self) -> RenderMode:
		return render_mode(self.state)

	def dispatch(self, event: Event) -> UIState:
		self.state = reduce(self.state, event)
		logger.debug(f"[Controller] {type(event).__name__} -> loading={self.state.is_loading} error={self.state.error_message!r} results={len(self.state.results)}")
		if self.on_change is not None:
			self.on_change(self.state)
		return self.state

	def set_input(self, value: str) -> None:
		"""Record what the user typed; the search fires once the input has been quiet for the debounce window."""
		self.dispatch(InputChanged(value))
		self._debouncer.update(value)

	def _on_settle(self, query: str) -> None:
		if query == self.state.debounced_query:
			return
		self.dispatch(QuerySettled(query))
		self._track(self._searches, asyncio.ensure_future(self.fetch_movies(query)))

	async def submit(self, query: str) -> UIState:
		"""Treat `query` as settled right away and run the search to completion."""
		self._debouncer.cancel()
		self.dispatch(QuerySettled(query))
		return await self.fetch_movies(query)

	async def fetch_movies(self, query: str = '') -> UIState:
		"""
		Run one catalog search and fold the outcome into the state.
		A successful non-empty search also records the term in the aggregation store in the background.
		"""
		seq = next(self._seq)
		self.dispatch(SearchStarted(seq))
		try:
			page = await self.catalog.search(query)
		except FetchError as exc:
			logger.error(f"[Controller] Error fetching movies: {exc}")
			return self.dispatch(SearchFailed(seq))

		message = page.soft_error
		if message is not None:
			logger.warning(f"[Controller] Catalog rejected query={query!r}: {message}")
			return self.dispatch(SearchSoftFailed(seq, message))

		state = self.dispatch(SearchSucceeded(seq, tuple(page.results)))
		if query and page.results:
			self._track(self._background, asyncio.ensure_future(self._record_search(query, page.results[0])))
		return state

	async def _record_search(self, query: str, top_match: MovieSummary) -> None:
		try:
			await self.store.record_search(query, top_match)
		except StoreError as exc:
			logger.warning(f"[Controller] Could not update search count for '{query}': {exc}")

	async def load_trending(self) -> UIState:
		"""Fill the trending list; a store failure leaves it empty without surfacing an error."""
		try:
			records = await self.store.get_trending(self.trending_limit)
		except StoreError as exc:
			logger.warning(f"[Controller] Error fetching trending movies: {exc}")
			return self.state
		return self.dispatch(TrendingLoaded(tuple(records)))

	async def start(self) -> UIState:
		"""Startup: load trending and run the initial discovery search concurrently."""
		logger.info("[Controller] Starting session")
		await asyncio.gather(self.load_trending(), self.fetch_movies(self.state.debounced_query))
		return self.state

	async def drain(self) -> None:
		"""Wait for in-flight searches and background writes started so far."""
		while True:
			pending = [t for t in (self._searches | self._background) if not t.done()]
			if not pending:
				return
			await asyncio.gather(*pending)

	def close(self) -> None:
		self._debouncer.cancel()

	@staticmethod
	def _track(tasks: Set[asyncio.Task], task: asyncio.Task) -> None:
		tasks.add(task)
		task.add_done_callback(tasks.discard)
