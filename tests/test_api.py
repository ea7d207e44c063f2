"""
API tests using FastAPI's TestClient with the catalog and store swapped for fakes.
Run: python -m pytest tests/test_api.py
"""

import asyncio
import sys

import pytest
from fastapi.testclient import TestClient
from loguru import logger

import api
from movie_finder.errors import FetchError, StoreReadError
from movie_finder.models import CatalogPage, MovieSummary, NO_POSTER, SearchCountRecord
from movie_finder.sql_store import SQLStore


class StubCatalog:
	def __init__(self, page=None, error=None):
		self.page = page
		self.error = error
		self.calls = []

	async def search(self, query):
		self.calls.append(query)
		await asyncio.sleep(0)
		if self.error is not None:
			raise self.error
		return self.page


class StubStore:
	def __init__(self, trending=None, read_error=None):
		self.trending = trending or []
		self.read_error = read_error
		self.recorded = []

	async def record_search(self, query, top_match):
		self.recorded.append((query, top_match.id))

	async def get_trending(self, limit):
		if self.read_error is not None:
			raise self.read_error
		return self.trending[:limit]


DUNE = MovieSummary.from_payload({
	"id": 438631, "title": "Dune", "poster_path": "/dune.jpg", "popularity": 99.0,
	"vote_average": 7.8, "original_language": "en", "release_date": "2021-09-15",
})
NO_ART = MovieSummary.from_payload({"id": 7, "title": "Obscure"})


@pytest.fixture
def wire():
	"""Install fakes through dependency overrides and remove them afterwards."""
	def install(catalog, store):
		api.app.dependency_overrides[api.get_catalog] = lambda: catalog
		api.app.dependency_overrides[api.get_store] = lambda: store
		return TestClient(api.app)
	yield install
	api.app.dependency_overrides.clear()


def test_health(wire):
	client = wire(StubCatalog(), StubStore())
	r = client.get("/health")
	assert r.status_code == 200
	assert r.json()["status"] == "ok"


def test_search_returns_cards_and_records_term(wire):
	catalog = StubCatalog(page=CatalogPage(results=[DUNE, NO_ART], payload={}))
	store = StubStore()
	client = wire(catalog, store)

	r = client.get("/movies", params={"query": "dune"})
	assert r.status_code == 200
	body = r.json()
	assert body["error_message"] == ""
	assert [m["id"] for m in body["results"]] == [438631, 7]
	first, second = body["results"]
	assert first["poster_url"] == "https://image.tmdb.org/t/p/w500/dune.jpg"
	assert (first["rating"], first["language"], first["year"]) == ("7.8", "en", "2021")
	assert second["poster_url"] == NO_POSTER
	assert store.recorded == [("dune", 438631)]


def test_empty_query_discovers_without_recording(wire):
	catalog = StubCatalog(page=CatalogPage(results=[DUNE], payload={}))
	store = StubStore()
	client = wire(catalog, store)

	body = client.get("/movies").json()
	assert catalog.calls == [""]
	assert len(body["results"]) == 1
	assert store.recorded == []


def test_catalog_failure_is_reported_in_body(wire):
	store = StubStore()
	client = wire(StubCatalog(error=FetchError("HTTP 500")), store)

	r = client.get("/movies", params={"query": "dune"})
	assert r.status_code == 200
	body = r.json()
	assert body["error_message"] == "Error fetching movies. Please try again later."
	assert body["results"] == []
	assert store.recorded == []


def test_trending_is_ranked(wire):
	records = [
		SearchCountRecord("dune", 5, "d.jpg", 1),
		SearchCountRecord("alien", 3, "a.jpg", 2),
		SearchCountRecord("heat", 1, "h.jpg", 3),
	]
	client = wire(StubCatalog(), StubStore(trending=records))

	body = client.get("/trending", params={"limit": 2}).json()
	assert [(t["rank"], t["search_term"], t["count"]) for t in body] == [(1, "dune", 5), (2, "alien", 3)]


def test_trending_store_failure_returns_empty_list(wire):
	client = wire(StubCatalog(), StubStore(read_error=StoreReadError("down")))
	r = client.get("/trending")
	assert r.status_code == 200
	assert r.json() == []


def test_provider_rejection_shows_provider_message(wire):
	rejected = CatalogPage(results=[DUNE], payload={"Response": "false", "error": "Too many results."})
	store = StubStore()
	client = wire(StubCatalog(page=rejected), store)

	r = client.get("/movies", params={"query": "a"})
	assert r.status_code == 200
	body = r.json()
	assert body["error_message"] == "Too many results."
	assert body["results"] == []
	assert store.recorded == []


def test_unreachable_sql_store_gives_empty_trending(wire, tmp_path):
	client = wire(StubCatalog(), SQLStore(f"sqlite:///{tmp_path}"))  # a directory, not a database file
	r = client.get("/trending")
	assert r.status_code == 200
	assert r.json() == []


@pytest.fixture
def restore_logging():
	yield
	logger.remove()
	logger.add(sys.__stderr__, level="INFO")


def test_startup_survives_unusable_database_url(monkeypatch, tmp_path, restore_logging):
	monkeypatch.delenv("APPWRITE_PROJECT_ID", raising=False)
	monkeypatch.setenv("STORE_BACKEND", "sql")
	monkeypatch.setenv("SEARCH_COUNTS_DB_URL", f"sqlite:///{tmp_path}")
	monkeypatch.setenv("TMDB_API_KEY", "")
	api.app.dependency_overrides.clear()

	with TestClient(api.app) as client:
		assert client.get("/health").json()["store_backend"] == "sql"
		assert client.get("/trending").json() == []
		body = client.get("/movies", params={"query": "dune"}).json()
		assert body["error_message"] == "Error fetching movies. Please try again later."
