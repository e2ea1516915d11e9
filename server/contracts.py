from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


class CityMatch(BaseModel):
    display_name: str
    country_code: str
    latitude: float
    longitude: float

    @classmethod
    def from_payload(cls, item: dict) -> CityMatch:
        return cls(
            display_name=item['name'],
            country_code=item['country'],
            latitude=item['lat'],
            longitude=item['lon'],
        )

    @property
    def label(self) -> str:
        return f'{self.display_name}, {self.country_code}'


class ForecastSample(BaseModel):
    timestamp: datetime
    temp_max: float
    temp_min: float
    description: str
    icon: str

    @classmethod
    def from_payload(cls, item: dict) -> ForecastSample:
        condition = item['weather'][0]
        return cls(
            timestamp=datetime.strptime(item['dt_txt'], TIMESTAMP_FORMAT),
            temp_max=item['main']['temp_max'],
            temp_min=item['main']['temp_min'],
            description=condition['description'],
            icon=condition['icon'],
        )

    @property
    def date_key(self) -> str:
        return self.timestamp.date().isoformat()


class DailyForecast(BaseModel):
    date: str
    temp_max: float
    temp_min: float
    description: str
    icon: str
    sample_count: int = 1

    @classmethod
    def from_sample(cls, sample: ForecastSample) -> DailyForecast:
        return cls(
            date=sample.date_key,
            temp_max=sample.temp_max,
            temp_min=sample.temp_min,
            description=sample.description,
            icon=sample.icon,
        )

    def fold(self, sample: ForecastSample) -> None:
        """Merge a later sample of the same day into the running extremes.

        The condition stays the one of the first sample of the day.
        """
        if sample.temp_max > self.temp_max:
            self.temp_max = sample.temp_max
        if sample.temp_min < self.temp_min:
            self.temp_min = sample.temp_min
        self.sample_count += 1


class SearchStatus(str, Enum):
    IDLE = 'idle'
    SEARCHING = 'searching'
    SUCCESS = 'success'
    ERROR = 'error'


class DashboardState(BaseModel):
    status: SearchStatus = SearchStatus.IDLE
    query: str | None = None
    display_name: str | None = None
    days: list[DailyForecast] = []
    error: str | None = None
    generation: int = 0

    @property
    def loading(self) -> bool:
        return self.status is SearchStatus.SEARCHING


class RangeBar(BaseModel):
    left: float
    width: float


class DayCard(BaseModel):
    date: str
    weekday: str
    day_label: str
    temp_max: int
    temp_min: int
    description: str
    icon_url: str
    theme: str
    range_bar: RangeBar


class DashboardView(BaseModel):
    status: SearchStatus
    loading: bool
    query: str | None
    display_name: str | None
    error: str | None
    generation: int
    days: list[DailyForecast]
    cards: list[DayCard]


class SearchRequest(BaseModel):
    city: str


class ForecastResult(BaseModel):
    city: str
    days: list[DailyForecast]
    cards: list[DayCard]
