"""
Console logging setup shared by the API and the Streamlit UI.
"""

import sys  # stderr sink

from loguru import logger  # console logger


LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def configure_logging(level: str = 'INFO') -> None:
	"""Replace loguru's default sink with a single stderr sink at `level`."""
	logger.remove()  # drop the default handler so repeated calls do not duplicate output
	logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
	logger.debug(f"[Logging] Console logging at level {level.upper()}")
