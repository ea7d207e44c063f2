"""
Error taxonomy for the Movie Finder.
None of these are fatal: callers degrade to an empty or partial page instead of crashing.
"""


class MovieFinderError(Exception):
	"""Base class for every error raised by the movie_finder package."""


class FetchError(MovieFinderError):
	"""The catalog request failed in transport, returned a non-success status, or returned an unreadable body."""


class SoftProviderError(MovieFinderError):
	"""The catalog answered with a success status but the payload signals a provider-side rejection."""


class StoreError(MovieFinderError):
	"""The aggregation store could not be reached or rejected the operation."""


class StoreWriteError(StoreError):
	pass


class StoreReadError(StoreError):
	pass
