from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from fastapi import APIRouter, Depends, HTTPException, Query

import httpx
from config.settings import app_settings
from server import contracts
from server.api.dashboard import build_cards, build_view
from server.contracts import CityMatch, DailyForecast, ForecastSample
from server.session import DashboardSession


logger = logging.getLogger(__name__)

router = APIRouter()

MAX_FORECAST_DAYS = 7
# the forecast series has one sample every 3 hours
SAMPLES_PER_DAY = 8


class WeatherError(Exception):
    message = 'Weather lookup failed'

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class CityNotFoundError(WeatherError):
    message = 'City not found'


class LocationFetchError(WeatherError):
    message = 'Failed to fetch city data'


class ForecastFetchError(WeatherError):
    message = 'Failed to fetch weather data'


class LocationResolver:
    def __init__(self, geocoding_url: str, api_key: str) -> None:
        self.geocoding_url = geocoding_url
        self.api_key = api_key

    async def resolve(self, city_name: str) -> CityMatch:
        params = {'q': city_name, 'limit': 1, 'appid': self.api_key}
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.geocoding_url, params=params)
        except httpx.RequestError as exc:
            logger.warning('Geocoding request for %r failed: %s', city_name, exc)
            raise LocationFetchError() from exc

        if response.status_code != httpx.codes.OK:
            logger.warning(
                'Geocoding for %r returned HTTP %d',
                city_name,
                response.status_code,
            )
            raise LocationFetchError()

        try:
            matches = response.json()
            if not matches:
                raise CityNotFoundError()
            return CityMatch.from_payload(matches[0])
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning('Malformed geocoding payload for %r: %s', city_name, exc)
            raise LocationFetchError() from exc


def group_by_day(samples: list[ForecastSample]) -> list[DailyForecast]:
    """Reduce a chronological sample series to one record per calendar day.

    Day order follows the first appearance of each date in ``samples``.
    """
    daily: dict[str, DailyForecast] = {}
    for sample in samples:
        day = daily.get(sample.date_key)
        if day is None:
            daily[sample.date_key] = DailyForecast.from_sample(sample)
        else:
            day.fold(sample)
    return list(daily.values())


class DailyForecastStrategy(ABC):
    def __init__(self, days: int = MAX_FORECAST_DAYS) -> None:
        self.days = days

    @abstractmethod
    def reduce(self, samples: list[ForecastSample]) -> list[DailyForecast]:
        pass  # pragma no cover


class FirstObservationStrategy(DailyForecastStrategy):
    """Keeps every day present in the series, including partial edge days."""

    def reduce(self, samples: list[ForecastSample]) -> list[DailyForecast]:
        return group_by_day(samples)[: self.days]


class CompleteDaysStrategy(DailyForecastStrategy):
    """Drops days covered by fewer than a full day of samples."""

    def reduce(self, samples: list[ForecastSample]) -> list[DailyForecast]:
        complete = [
            day
            for day in group_by_day(samples)
            if day.sample_count >= SAMPLES_PER_DAY
        ]
        return complete[: self.days]


class ForecastAggregator:
    def __init__(
        self,
        forecast_url: str,
        api_key: str,
        strategy: DailyForecastStrategy | None = None,
    ) -> None:
        self.forecast_url = forecast_url
        self.api_key = api_key
        self.strategy = strategy or FirstObservationStrategy()

    async def fetch_samples(
        self, latitude: float, longitude: float
    ) -> list[ForecastSample]:
        params = {
            'lat': latitude,
            'lon': longitude,
            'units': 'metric',
            'appid': self.api_key,
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.forecast_url, params=params)
        except httpx.RequestError as exc:
            logger.warning(
                'Forecast request for (%s, %s) failed: %s',
                latitude,
                longitude,
                exc,
            )
            raise ForecastFetchError() from exc

        if response.status_code != httpx.codes.OK:
            logger.warning(
                'Forecast for (%s, %s) returned HTTP %d',
                latitude,
                longitude,
                response.status_code,
            )
            raise ForecastFetchError()

        try:
            data = response.json()
            return [ForecastSample.from_payload(item) for item in data['list']]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning('Malformed forecast payload: %s', exc)
            raise ForecastFetchError() from exc

    async def aggregate(
        self, latitude: float, longitude: float
    ) -> list[DailyForecast]:
        samples = await self.fetch_samples(latitude, longitude)
        return self.strategy.reduce(samples)


def create_strategy(
    drop_partial_days: bool, days: int = MAX_FORECAST_DAYS
) -> DailyForecastStrategy:
    if drop_partial_days:
        return CompleteDaysStrategy(days)
    return FirstObservationStrategy(days)


async def run_search(
    session: DashboardSession,
    city: str,
    resolver: LocationResolver,
    aggregator: ForecastAggregator,
) -> contracts.DashboardState:
    token = session.begin(city)
    if token is None:
        return session.snapshot()
    return await finish_search(session, token, city, resolver, aggregator)


async def finish_search(
    session: DashboardSession,
    token: int,
    city: str,
    resolver: LocationResolver,
    aggregator: ForecastAggregator,
) -> contracts.DashboardState:
    """Run the lookups of a search already started with ``session.begin``."""
    try:
        match = await resolver.resolve(city)
        days = await aggregator.aggregate(match.latitude, match.longitude)
    except WeatherError as exc:
        logger.warning('Search #%d for %r failed: %s', token, city, exc.message)
        session.fail(token, exc.message)
    else:
        logger.info(
            'Search #%d for %r resolved to %s with %d days',
            token,
            city,
            match.label,
            len(days),
        )
        session.succeed(token, match.label, days)
    return session.snapshot()


dashboard_session = DashboardSession()
location_resolver = LocationResolver(
    app_settings.geocoding_url, app_settings.openweather_api_key
)
forecast_aggregator = ForecastAggregator(
    app_settings.forecast_url,
    app_settings.openweather_api_key,
    create_strategy(app_settings.drop_partial_days, app_settings.forecast_days),
)


def get_session() -> DashboardSession:
    return dashboard_session


def get_resolver() -> LocationResolver:
    return location_resolver


def get_aggregator() -> ForecastAggregator:
    return forecast_aggregator


@router.get('/weather/state')
async def weather_state(
    session: DashboardSession = Depends(get_session),
) -> contracts.DashboardView:
    return build_view(session.snapshot())


@router.post('/weather/search')
async def weather_search(
    search: contracts.SearchRequest,
    session: DashboardSession = Depends(get_session),
    resolver: LocationResolver = Depends(get_resolver),
    aggregator: ForecastAggregator = Depends(get_aggregator),
) -> contracts.DashboardView:
    state = await run_search(session, search.city, resolver, aggregator)
    return build_view(state)


@router.get('/weather/forecast')
async def weather_forecast(
    city: str = Query(min_length=1),
    resolver: LocationResolver = Depends(get_resolver),
    aggregator: ForecastAggregator = Depends(get_aggregator),
) -> contracts.ForecastResult:
    try:
        match = await resolver.resolve(city)
        days = await aggregator.aggregate(match.latitude, match.longitude)
    except CityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except WeatherError as exc:
        raise HTTPException(status_code=502, detail=exc.message) from exc
    return contracts.ForecastResult(
        city=match.label, days=days, cards=build_cards(days)
    )
