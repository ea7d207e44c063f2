"""
Catalog client tests against a mocked TMDB transport.
Run: python -m pytest tests/test_catalog_client.py
"""

import asyncio
import json

import httpx
import pytest

from movie_finder.catalog_client import CatalogClient
from movie_finder.errors import FetchError


BASE = "https://api.themoviedb.org/3"


def make_client(handler, api_key="secret-token"):
	transport = httpx.MockTransport(handler)
	return CatalogClient(api_key, BASE, client=httpx.AsyncClient(transport=transport))


def json_handler(body, status=200, seen=None):
	def handler(request: httpx.Request) -> httpx.Response:
		if seen is not None:
			seen.append(request)
		return httpx.Response(status, json=body)
	return handler


def search(client, query):
	async def scenario():
		try:
			return await client.search(query)
		finally:
			await client._client.aclose()
	return asyncio.run(scenario())


def test_empty_query_issues_discovery_request():
	seen = []
	client = make_client(json_handler({"page": 1, "results": [{"id": 1, "title": "A"}]}, seen=seen))
	page = search(client, "")
	assert len(seen) == 1
	assert seen[0].url.path == "/3/discover/movie"
	assert seen[0].url.params["sort_by"] == "popularity.desc"
	assert [m.id for m in page.results] == [1]


def test_search_query_is_percent_encoded():
	seen = []
	client = make_client(json_handler({"results": []}, seen=seen))
	search(client, "tom & jerry")
	assert seen[0].url.path == "/3/search/movie"
	assert seen[0].url.params["query"] == "tom & jerry"
	assert client.build_url("tom & jerry") == f"{BASE}/search/movie?query=tom%20%26%20jerry"
	assert client.build_url("") == f"{BASE}/discover/movie?sort_by=popularity.desc"


def test_sends_bearer_token_and_accept_header():
	seen = []
	client = make_client(json_handler({"results": []}, seen=seen))
	search(client, "dune")
	assert seen[0].headers["Authorization"] == "Bearer secret-token"
	assert seen[0].headers["Accept"] == "application/json"


def test_missing_results_key_means_empty_list():
	client = make_client(json_handler({"page": 1}))
	page = search(client, "zzzz")
	assert page.results == []
	assert page.soft_error is None


def test_http_500_raises_fetch_error():
	client = make_client(json_handler({"status_message": "boom"}, status=500))
	with pytest.raises(FetchError):
		search(client, "dune")


def test_transport_failure_raises_fetch_error():
	def handler(request):
		raise httpx.ConnectError("connection refused", request=request)
	client = make_client(handler)
	with pytest.raises(FetchError):
		search(client, "dune")


def test_non_json_body_raises_fetch_error():
	client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
	with pytest.raises(FetchError):
		search(client, "dune")


def test_missing_api_key_fails_on_first_use():
	seen = []
	client = make_client(json_handler({"results": []}, seen=seen), api_key="")
	with pytest.raises(FetchError):
		search(client, "dune")
	assert seen == []  # no request leaves the process


def test_provider_rejection_is_soft():
	client = make_client(json_handler({"Response": "false", "error": "Too many results."}))
	page = search(client, "a")
	assert page.soft_error == "Too many results."
	assert json.dumps(page.payload)  # raw payload kept for inspection
