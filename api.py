"""
FastAPI server exposing the movie browsing flow.
Endpoints:
- GET /health: basic health check
- GET /movies?query=...: searches the catalog (discover popular when query is empty) and records the search
- GET /trending?limit=5: most searched terms, highest count first

Startup reads settings from the environment and builds the catalog client and the aggregation store once.
"""

# Import typing helpers for response models
from typing import List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for response models
from fastapi import Depends, FastAPI, Query  # FastAPI primitives
from pydantic import BaseModel  # response schema definitions

# Import our internal modules
from movie_finder.aggregation_store import AggregationStore, create_store  # search-count store
from movie_finder.catalog_client import CatalogClient  # TMDB client
from movie_finder.config import Settings  # environment settings
from movie_finder.logging_setup import configure_logging  # console logging
from movie_finder.models import MovieSummary
from movie_finder.view_controller import ViewController  # search orchestration

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="Movie Finder API", version="1.0.0")  # web app

# Globals that hold the shared clients
SETTINGS: Settings = Settings()  # replaced at startup
CATALOG: Optional[CatalogClient] = None  # TMDB client
STORE: Optional[AggregationStore] = None  # search-count store


# Pydantic model that describes the shape of a single movie in responses
class MovieOut(BaseModel):
	id: int  # catalog id
	title: str  # display title
	poster_url: str  # full poster URL or placeholder
	rating: str  # one decimal or "N/A"
	language: str  # original language code
	year: str  # release year or "N/A"
	popularity: float  # provider popularity
	overview: Optional[str] = None  # synopsis


# Pydantic model for the search response payload
class MoviesResponse(BaseModel):
	query: str  # query as received
	error_message: str  # empty unless the catalog failed
	results: List[MovieOut]  # catalog order


# Pydantic model for one trending entry
class TrendingOut(BaseModel):
	rank: int  # 1-based position
	search_term: str
	count: int
	poster_url: str
	movie_id: Optional[int] = None


def to_movie_out(movie: MovieSummary, image_base_url: str) -> MovieOut:
	return MovieOut(
		id=movie.id,
		title=movie.title,
		poster_url=movie.poster_url(image_base_url),
		rating=movie.rating_label,
		language=movie.language_label,
		year=movie.year,
		popularity=movie.popularity,
		overview=movie.overview,
	)


def get_settings() -> Settings:
	return SETTINGS


def get_catalog() -> CatalogClient:
	global CATALOG
	if CATALOG is None:  # startup hook not run (e.g. under a bare test client)
		CATALOG = CatalogClient.from_settings(SETTINGS)
	return CATALOG


def get_store() -> AggregationStore:
	global STORE
	if STORE is None:
		STORE = create_store(SETTINGS)
	return STORE


# FastAPI startup hook to initialize shared clients once
@app.on_event("startup")
async def startup_event():
	"""Read settings and build the catalog client and the aggregation store."""
	global SETTINGS, CATALOG, STORE  # refer to module-level globals
	SETTINGS = Settings.from_env()  # environment + .env
	configure_logging(SETTINGS.log_level)
	CATALOG = CatalogClient.from_settings(SETTINGS)
	STORE = create_store(SETTINGS)
	logger.info(f"[API] Startup complete. Store backend: {SETTINGS.store_backend}")


@app.on_event("shutdown")
async def shutdown_event():
	"""Close HTTP clients and database connections."""
	if CATALOG is not None:
		await CATALOG.close()
	if STORE is not None:
		await STORE.close()
	logger.info("[API] Shutdown complete")


# Simple health endpoint for readiness checks
@app.get("/health")
async def health(settings: Settings = Depends(get_settings)):
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"store_backend": settings.store_backend,  # which aggregation store is in use
	}


# Main search endpoint; an empty query means "discover popular"
@app.get("/movies", response_model=MoviesResponse)
async def movies(
	query: str = Query("", description="Movie title text; empty for popular movies"),
	catalog: CatalogClient = Depends(get_catalog),
	store: AggregationStore = Depends(get_store),
	settings: Settings = Depends(get_settings),
):
	"""Search the catalog and report results or the error message the page should show."""
	logger.debug(f"[API] /movies query='{query}'")  # debug log of input
	controller = ViewController(catalog, store, trending_limit=settings.trending_limit)
	state = await controller.submit(query)  # run search
	await controller.drain()  # let the search-count write finish before responding
	controller.close()
	logger.info(f"[API] /movies served {len(state.results)} results")  # summary

	return MoviesResponse(
		query=query,
		error_message=state.error_message,
		results=[to_movie_out(m, settings.tmdb_image_base_url) for m in state.results],
	)


# Trending endpoint; store failures degrade to an empty list
@app.get("/trending", response_model=List[TrendingOut])
async def trending(
	limit: Optional[int] = Query(None, ge=0, le=100, description="Number of trending terms"),
	catalog: CatalogClient = Depends(get_catalog),
	store: AggregationStore = Depends(get_store),
	settings: Settings = Depends(get_settings),
):
	"""Return the most searched terms."""
	controller = ViewController(catalog, store, trending_limit=settings.trending_limit if limit is None else limit)
	state = await controller.load_trending()
	return [
		TrendingOut(
			rank=i,
			search_term=r.search_term,
			count=r.count,
			poster_url=r.poster_url,
			movie_id=r.movie_id,
		)
		for i, r in enumerate(state.trending, start=1)
	]
