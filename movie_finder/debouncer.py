"""
Debounced value utility.

Holds back a rapidly changing input until it has stayed unchanged for a quiet window,
so a search is fired once per settled query instead of once per keystroke.
"""

import asyncio
from typing import Callable, Optional

from loguru import logger


class Debouncer:
	"""
	Derives a settled value from a continuously updating source.

	Each `update` cancels the pending timer and arms a new one; only the value present when a
	timer finally fires is emitted. Intermediate values are discarded. If the source never goes
	quiet, `value` keeps its initial value.
	"""

	def __init__(
		self,
		delay_ms: int = 500,
		on_settle: Optional[Callable[[str], None]] = None,
		initial: str = '',
	):
		"""
		Args:
			delay_ms: quiet window in milliseconds
			on_settle: called with the settled value each time a timer fires
			initial: derived value before anything settles
		"""
		if delay_ms < 0:
			raise ValueError("delay_ms must be >= 0")
		self.delay_ms = delay_ms
		self.on_settle = on_settle
		self.value = initial  # derived (settled) value
		self._source = initial  # latest source value
		self._timer: Optional[asyncio.TimerHandle] = None

	@property
	def pending(self) -> bool:
		"""True while a timer is armed and the source has not settled yet."""
		return self._timer is not None

	def update(self, value: str) -> None:
		"""Record a new source value and restart the quiet window. Needs a running event loop."""
		loop = asyncio.get_running_loop()
		self._source = value
		self.cancel()
		self._timer = loop.call_later(self.delay_ms / 1000.0, self._settle)

	def cancel(self) -> None:
		"""Drop the pending timer, if any, without emitting."""
		if self._timer is not None:
			self._timer.cancel()
			self._timer = None

	def _settle(self) -> None:
		self._timer = None
		self.value = self._source
		logger.debug(f"[Debouncer] Settled on {self.value!r} after {self.delay_ms} ms")
		if self.on_settle is not None:
			self.on_settle(self.value)
