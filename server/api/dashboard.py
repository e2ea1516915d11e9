from __future__ import annotations

import math
from datetime import date
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from config.settings import app_settings
from server import contracts


router = APIRouter()

DASHBOARD_HTML = Path(__file__).parent.parent / 'static' / 'dashboard.html'
API_PREFIX_PLACEHOLDER = '{{ api_prefix }}'

# (exclusive lower bound in °C, theme), warmest first
CARD_THEMES = (
    (30, 'hot'),
    (25, 'warm'),
    (20, 'mild'),
    (15, 'cool'),
)
COLDEST_THEME = 'cold'

# the range bar spans -10°..30°, 3% per degree
RANGE_BAR_OFFSET = 10
RANGE_BAR_SCALE = 3


def icon_url(icon_code: str, base_url: str | None = None) -> str:
    base_url = base_url or app_settings.icon_base_url
    return f'{base_url.rstrip("/")}/{icon_code}@2x.png'


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def card_theme(temp_max: float) -> str:
    for threshold, theme in CARD_THEMES:
        if temp_max > threshold:
            return theme
    return COLDEST_THEME


def range_bar(temp_max: float, temp_min: float) -> contracts.RangeBar:
    width = min(100, max(5, (temp_max + RANGE_BAR_OFFSET) * RANGE_BAR_SCALE))
    left = max(0, (temp_min + RANGE_BAR_OFFSET) * RANGE_BAR_SCALE)
    return contracts.RangeBar(left=left, width=width)


def build_card(
    day: contracts.DailyForecast, icon_base_url: str | None = None
) -> contracts.DayCard:
    day_date = date.fromisoformat(day.date)
    return contracts.DayCard(
        date=day.date,
        weekday=day_date.strftime('%a'),
        day_label=f'{day_date:%b} {day_date.day}',
        temp_max=round_half_up(day.temp_max),
        temp_min=round_half_up(day.temp_min),
        description=day.description,
        icon_url=icon_url(day.icon, icon_base_url),
        theme=card_theme(day.temp_max),
        range_bar=range_bar(day.temp_max, day.temp_min),
    )


def build_cards(
    days: list[contracts.DailyForecast], icon_base_url: str | None = None
) -> list[contracts.DayCard]:
    return [build_card(day, icon_base_url) for day in days]


def build_view(state: contracts.DashboardState) -> contracts.DashboardView:
    return contracts.DashboardView(
        status=state.status,
        loading=state.loading,
        query=state.query,
        display_name=state.display_name,
        error=state.error,
        generation=state.generation,
        days=state.days,
        cards=build_cards(state.days),
    )


@router.get('/', include_in_schema=False)
async def serve_dashboard(request: Request):
    if DASHBOARD_HTML.exists():
        api_prefix = getattr(
            request.app.state, 'api_prefix', app_settings.api_prefix
        )
        page = DASHBOARD_HTML.read_text(encoding='utf-8')
        return HTMLResponse(page.replace(API_PREFIX_PLACEHOLDER, api_prefix))
    return HTMLResponse('<h1>Dashboard not found</h1>', status_code=404)
