from __future__ import annotations

import logging

from server.contracts import DailyForecast, DashboardState, SearchStatus


logger = logging.getLogger(__name__)


class DashboardSession:
    """State of the dashboard view: idle -> searching -> success | error.

    Every search gets a generation token from ``begin``. Only the newest
    token may commit an outcome, so a slow response from a replaced
    search never overwrites the result of the one that superseded it.
    """

    def __init__(self) -> None:
        self._state = DashboardState()

    @property
    def generation(self) -> int:
        return self._state.generation

    def begin(self, city: str) -> int | None:
        if not city:
            return None
        self._state.generation += 1
        self._state.status = SearchStatus.SEARCHING
        self._state.query = city
        self._state.error = None
        logger.debug(
            'Search #%d started for %r', self._state.generation, city
        )
        return self._state.generation

    def succeed(
        self, token: int, display_name: str, days: list[DailyForecast]
    ) -> bool:
        if not self._is_current(token):
            return False
        self._state.status = SearchStatus.SUCCESS
        self._state.display_name = display_name
        self._state.days = list(days)
        return True

    def fail(self, token: int, message: str) -> bool:
        # the previously shown city and days stay on screen
        if not self._is_current(token):
            return False
        self._state.status = SearchStatus.ERROR
        self._state.error = message
        return True

    def snapshot(self) -> DashboardState:
        return self._state.model_copy(deep=True)

    def _is_current(self, token: int) -> bool:
        if token != self._state.generation:
            logger.info(
                'Dropping stale result of search #%d (current is #%d)',
                token,
                self._state.generation,
            )
            return False
        return True
