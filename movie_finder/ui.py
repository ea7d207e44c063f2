"""
Streamlit rendering helpers for the Movie Finder page.
Kept apart from streamlit_app.py so the widgets can be exercised on their own.
"""

from typing import Dict, List  # payload shapes

import streamlit as st  # UI primitives

from .models import NO_POSTER


def show_poster(poster_url: str, caption: str = '') -> None:
	"""Poster image, or a text stand-in when the movie has no poster."""
	if not poster_url or poster_url == NO_POSTER:
		st.caption(f"🎬 No poster{f' • {caption}' if caption else ''}")
		return
	st.image(poster_url, caption=caption or None, width="stretch")


def render_trending(trending: List[Dict]) -> None:
	"""Trending strip: rank number and poster per search term."""
	if not trending:
		return
	st.header("Trending Movies")
	cols = st.columns(len(trending))
	for col, item in zip(cols, trending):
		with col:
			st.subheader(str(item["rank"]))
			show_poster(item.get("poster_url", ""), item["search_term"])


def render_movies(results: List[Dict], per_row: int = 4) -> None:
	"""Result grid: poster, title, rating, language and year."""
	for start in range(0, len(results), per_row):
		row = st.columns(per_row)
		for col, movie in zip(row, results[start:start + per_row]):
			with col:
				show_poster(movie.get("poster_url", ""))
				st.markdown(f"**{movie['title']}**")
				st.caption(f"⭐ {movie['rating']} • {movie['language']} • {movie['year']}")
