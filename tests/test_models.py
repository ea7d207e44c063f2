"""
Unit tests for the data models: catalog item parsing, display labels and soft-error detection.
Run: python -m pytest tests/test_models.py
"""

import pytest

from movie_finder.errors import SoftProviderError
from movie_finder.models import NO_POSTER, CatalogPage, MovieSummary, UIState


def make_item(**overrides):
	item = {
		"id": 438631,
		"title": "Dune",
		"poster_path": "/d5NXSklXo0qyIYkgV94XAgMIckC.jpg",
		"popularity": 211.5,
		"vote_average": 7.794,
		"original_language": "en",
		"release_date": "2021-09-15",
		"overview": "Paul Atreides...",
		"adult": False,
	}
	item.update(overrides)
	return item


def test_from_payload_keeps_display_fields_and_raw():
	movie = MovieSummary.from_payload(make_item())
	assert movie.id == 438631
	assert movie.title == "Dune"
	assert movie.year == "2021"
	assert movie.rating_label == "7.8"
	assert movie.language_label == "en"
	assert movie.raw["adult"] is False  # pass-through field


def test_missing_display_fields_fall_back_to_na():
	movie = MovieSummary.from_payload({"id": 1, "title": "Untitled Project", "release_date": "", "vote_average": 0})
	assert movie.year == "N/A"
	assert movie.rating_label == "N/A"
	assert movie.language_label == "N/A"
	assert movie.poster_path is None


def test_from_payload_requires_id():
	with pytest.raises(ValueError):
		MovieSummary.from_payload({"title": "No id"})


def test_poster_url():
	base = "https://image.tmdb.org/t/p/w500"
	assert MovieSummary.from_payload(make_item()).poster_url(base) == base + "/d5NXSklXo0qyIYkgV94XAgMIckC.jpg"
	assert MovieSummary.from_payload(make_item(poster_path=None)).poster_url(base) == NO_POSTER


def test_soft_error_literal_false_string():
	page = CatalogPage(results=[], payload={"Response": "false", "error": "Movie not found!"})
	assert page.soft_error == "Movie not found!"
	with pytest.raises(SoftProviderError):
		page.raise_for_soft_error()


def test_soft_error_needs_the_literal_string():
	# A boolean False in "Response" is not the provider's failure marker
	assert CatalogPage(results=[], payload={"Response": False}).soft_error is None
	assert CatalogPage(results=[], payload={"Response": "False"}).soft_error is None


def test_soft_error_from_tmdb_success_flag_and_default_message():
	page = CatalogPage(results=[], payload={"success": False, "status_message": "Invalid API key"})
	assert page.soft_error == "Invalid API key"
	assert CatalogPage(results=[], payload={"Response": "false"}).soft_error == "Failed to fetch movies"


def test_no_soft_error_on_normal_payload():
	page = CatalogPage(results=[], payload={"page": 1, "results": []})
	assert page.soft_error is None
	page.raise_for_soft_error()  # does not raise


def test_ui_state_defaults():
	state = UIState()
	assert state.input_value == "" and state.debounced_query == ""
	assert state.results == () and state.trending == ()
	assert state.is_loading is False
	assert state.error_message == ""
