"""
Streamlit UI for the Movie Finder.
Calls the local FastAPI server at http://localhost:8000 for movies and trending searches,
or runs the same controller in-process when the API is unreachable.

Run API (optional):   uvicorn api:app --reload
Run UI:                streamlit run streamlit_app.py
"""

# Async runner for the in-process controller
import asyncio  # drive the controller coroutines
# HTTP client to call the API when running in API mode
import requests  # make web requests to the FastAPI server
# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import Dict, List, Tuple  # result shapes

# Local imports for fallback/local mode (when API isn't used)
from movie_finder.aggregation_store import create_store  # search-count store
from movie_finder.catalog_client import CatalogClient  # TMDB client
from movie_finder.config import Settings  # environment settings
from movie_finder.logging_setup import configure_logging  # console logging
from movie_finder.models import RenderMode, UIState
from movie_finder.ui import render_movies, render_trending  # page widgets
from movie_finder.view_controller import ViewController, render_mode

from loguru import logger  # console logging

SETTINGS = Settings.from_env()  # read once per script run
configure_logging(SETTINGS.log_level)

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="Movie Finder", layout="wide")  # wide layout

# Main page title
st.title("Find Movies You'll Enjoy Without the Hassle")  # friendly header


async def run_local(query: str, load_trending: bool) -> UIState:
	"""Build clients for this run, search, optionally load trending, and return the final state."""
	store = create_store(SETTINGS)
	async with CatalogClient.from_settings(SETTINGS) as catalog:
		controller = ViewController(catalog, store, SETTINGS.debounce_ms, SETTINGS.trending_limit)
		try:
			if load_trending:
				await controller.load_trending()
			await controller.submit(query)
			await controller.drain()  # finish the search-count write before the loop closes
		finally:
			controller.close()
			await store.close()
	return controller.state


def state_to_payload(state: UIState) -> Tuple[Dict, List[Dict]]:
	"""Convert controller state to the same dict shapes the API returns."""
	movies = {
		"error_message": state.error_message,
		"results": [
			{
				"id": m.id,
				"title": m.title,
				"poster_url": m.poster_url(SETTINGS.tmdb_image_base_url),
				"rating": m.rating_label,
				"language": m.language_label,
				"year": m.year,
			}
			for m in state.results
		],
	}
	trending = [
		{"rank": i, "search_term": r.search_term, "poster_url": r.poster_url, "count": r.count}
		for i, r in enumerate(state.trending, start=1)
	]
	return movies, trending


# Sidebar contains configuration controls
with st.sidebar:
	st.header("Settings")  # section label
	api_url = st.text_input("API URL", SETTINGS.api_url)  # where the API lives
	use_local = st.toggle("Use local controller", value=False, help="If enabled or the API is unreachable, the app runs fully locally.")

# If not forcing local, check quickly whether the API is reachable
api_available = False  # default assumption
if not use_local:
	try:
		h = requests.get(f"{api_url}/health", timeout=3)  # ping API health endpoint
		api_available = h.ok  # True if server responded 200 OK
	except requests.RequestException:
		api_available = False  # probe failed
		st.sidebar.info("API not reachable; using local controller.")  # inform user

# Search box; Streamlit reruns the script once the input is submitted
query = st.text_input("Search", placeholder="Search through thousands of movies", key="search_term")

# Trending is loaded once per session
need_trending = "trending" not in st.session_state

with st.spinner("Loading movies..."):
	try:
		if api_available:
			# API mode: the server searches and records the term
			resp = requests.get(f"{api_url}/movies", params={"query": query}, timeout=60)
			resp.raise_for_status()  # raise error if server responded with an error code
			movies_payload = resp.json()  # parse JSON returned by API
			if need_trending:
				t = requests.get(f"{api_url}/trending", params={"limit": SETTINGS.trending_limit}, timeout=10)
				st.session_state["trending"] = t.json() if t.ok else []
			mode = RenderMode.ERROR if movies_payload.get("error_message") else RenderMode.RESULTS
		else:
			state = asyncio.run(run_local(query, need_trending))
			movies_payload, trending_payload = state_to_payload(state)
			if need_trending:
				st.session_state["trending"] = trending_payload
			mode = render_mode(state)
	except requests.RequestException as e:  # network/API errors
		logger.error(f"[UI] API request failed: {e}")
		movies_payload = {"error_message": "Error fetching movies. Please try again later.", "results": []}
		mode = RenderMode.ERROR

# Trending strip: rank number and poster
render_trending(st.session_state.get("trending") or [])

st.header("All Movies")
if mode == RenderMode.ERROR:
	st.error(movies_payload["error_message"])  # provider or generic message
else:
	render_movies(movies_payload.get("results", []))  # four cards per row

# Show a footer indicator of current mode
st.sidebar.markdown("---")  # separator
if api_available:
	st.sidebar.caption("Mode: API client (ensure uvicorn api:app --reload is running)")  # mode label
else:
	st.sidebar.caption("Mode: Local controller")  # mode label
