"""
Process configuration.
Values come from the environment (a local .env file is loaded first). Nothing is validated eagerly:
a missing API key or store parameter only surfaces when the catalog or the store is first used.
"""

import os  # environment access
from dataclasses import dataclass  # settings container

from dotenv import load_dotenv  # .env support for local development


TMDB_BASE_URL = 'https://api.themoviedb.org/3'
TMDB_IMAGE_BASE_URL = 'https://image.tmdb.org/t/p/w500'
APPWRITE_ENDPOINT = 'https://cloud.appwrite.io/v1'


@dataclass
class Settings:
	tmdb_api_key: str = ''
	tmdb_base_url: str = TMDB_BASE_URL
	tmdb_image_base_url: str = TMDB_IMAGE_BASE_URL
	http_timeout: float = 30.0
	store_backend: str = 'sql'  # 'appwrite' or 'sql'
	search_counts_db_url: str = 'sqlite:///data/search_counts.db'
	appwrite_endpoint: str = APPWRITE_ENDPOINT
	appwrite_project_id: str = ''
	appwrite_database_id: str = ''
	appwrite_collection_id: str = ''
	appwrite_api_key: str = ''
	debounce_ms: int = 500
	trending_limit: int = 5
	log_level: str = 'INFO'
	api_url: str = 'http://localhost:8000'

	@classmethod
	def from_env(cls, load_env_file: bool = True) -> 'Settings':
		"""Read settings from the process environment."""
		if load_env_file:
			load_dotenv()  # no-op when .env is absent

		project_id = os.getenv('APPWRITE_PROJECT_ID', '')
		# Use the hosted store only when it has been configured
		default_backend = 'appwrite' if project_id else 'sql'

		return cls(
			tmdb_api_key=os.getenv('TMDB_API_KEY', ''),
			tmdb_base_url=os.getenv('TMDB_BASE_URL', TMDB_BASE_URL),
			tmdb_image_base_url=os.getenv('TMDB_IMAGE_BASE_URL', TMDB_IMAGE_BASE_URL),
			http_timeout=float(os.getenv('HTTP_TIMEOUT', '30.0')),
			store_backend=os.getenv('STORE_BACKEND', default_backend).strip().lower(),
			search_counts_db_url=os.getenv('SEARCH_COUNTS_DB_URL', 'sqlite:///data/search_counts.db'),
			appwrite_endpoint=os.getenv('APPWRITE_ENDPOINT', APPWRITE_ENDPOINT),
			appwrite_project_id=project_id,
			appwrite_database_id=os.getenv('APPWRITE_DATABASE_ID', ''),
			appwrite_collection_id=os.getenv('APPWRITE_COLLECTION_ID', ''),
			appwrite_api_key=os.getenv('APPWRITE_API_KEY', ''),
			debounce_ms=int(os.getenv('DEBOUNCE_MS', '500')),
			trending_limit=int(os.getenv('TRENDING_LIMIT', '5')),
			log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
			api_url=os.getenv('MOVIE_FINDER_API_URL', 'http://localhost:8000'),
		)
