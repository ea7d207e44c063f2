"""
Data models for the Movie Finder.
Defines the records passed between the catalog client, the aggregation store and the view controller.
"""

# Import dataclass helpers to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
from enum import Enum  # render modes
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional, Tuple

from .errors import SoftProviderError


# Placeholder shown when a catalog item has no poster
NO_POSTER = 'no-movie.png'
# Fallback message for provider-side rejections that carry no text
DEFAULT_SOFT_ERROR = 'Failed to fetch movies'


@dataclass
class MovieSummary:
	"""
	One movie as returned by the catalog.
	Only `id` and the display fields are consumed; everything else rides along in `raw`.
	"""
	id: int  # catalog identifier
	title: str  # display title
	poster_path: Optional[str] = None  # relative poster path, e.g. "/abc.jpg"
	popularity: float = 0.0  # provider popularity score
	vote_average: Optional[float] = None  # 0..10 rating
	original_language: Optional[str] = None  # ISO 639-1 code
	release_date: Optional[str] = None  # "YYYY-MM-DD" or empty
	overview: Optional[str] = None  # synopsis
	raw: Dict[str, Any] = field(default_factory=dict, repr=False)  # untouched catalog item

	@classmethod
	def from_payload(cls, data: Dict[str, Any]) -> 'MovieSummary':
		"""Build a MovieSummary from one item of the catalog `results` list."""
		if 'id' not in data:
			raise ValueError("Catalog item is missing 'id'")
		return cls(
			id=data['id'],
			title=data.get('title') or data.get('name') or 'Untitled',
			poster_path=data.get('poster_path') or None,
			popularity=float(data.get('popularity') or 0.0),
			vote_average=data.get('vote_average'),
			original_language=data.get('original_language'),
			release_date=data.get('release_date') or None,
			overview=data.get('overview'),
			raw=dict(data),
		)

	def poster_url(self, image_base_url: str) -> str:
		"""Full poster URL, or the placeholder image when the movie has none."""
		if not self.poster_path:
			return NO_POSTER
		return f"{image_base_url.rstrip('/')}{self.poster_path}"

	@property
	def year(self) -> str:
		if not self.release_date:
			return 'N/A'
		return self.release_date.split('-')[0]

	@property
	def rating_label(self) -> str:
		if not self.vote_average:
			return 'N/A'
		return f"{float(self.vote_average):.1f}"

	@property
	def language_label(self) -> str:
		return self.original_language or 'N/A'


@dataclass
class CatalogPage:
	"""
	Parsed catalog response: the normalized results plus the raw payload.
	A success-status payload can still signal a provider-side rejection (a soft error).
	"""
	results: List[MovieSummary]
	payload: Dict[str, Any]

	@property
	def soft_error(self) -> Optional[str]:
		"""Provider message when the payload signals failure, otherwise None."""
		# The provider marks rejections with the literal string "false", not a boolean
		rejected = self.payload.get('Response') == 'false' or self.payload.get('success') is False
		if not rejected:
			return None
		return self.payload.get('error') or self.payload.get('status_message') or DEFAULT_SOFT_ERROR

	def raise_for_soft_error(self) -> None:
		message = self.soft_error
		if message is not None:
			raise SoftProviderError(message)


@dataclass
class SearchCountRecord:
	"""
	Aggregated hits for one search term.
	At most one record exists per distinct term; `count` only ever grows.
	"""
	search_term: str  # unique key, exact string match
	count: int  # successful searches so far (>= 1)
	poster_url: str  # poster of the top match captured at creation
	movie_id: Optional[int]  # id of the top match captured at creation; None if the document lacks it
	record_id: Optional[str] = None  # store-assigned identifier


class RenderMode(str, Enum):
	LOADING = 'loading'
	ERROR = 'error'
	RESULTS = 'results'


@dataclass(frozen=True)
class UIState:
	"""
	Everything the page shows. Replaced as a whole by the view controller's reducer, never mutated.
	"""
	input_value: str = ''  # raw text in the search box
	debounced_query: str = ''  # last settled query
	results: Tuple[MovieSummary, ...] = ()  # current result list, catalog order
	is_loading: bool = False  # a search for the latest query is in flight
	error_message: str = ''  # empty when there is no error
	trending: Tuple[SearchCountRecord, ...] = ()  # top records by count, descending
	latest_request: int = 0  # sequence number of the last search issued
