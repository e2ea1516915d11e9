import pytest

from tests.helpers import forecast_item


@pytest.fixture
def geocoding_payload():
    return [
        {
            'name': 'Shanghai',
            'local_names': {'zh': '上海市'},
            'lat': 31.2323437,
            'lon': 121.4691024,
            'country': 'CN',
        }
    ]


@pytest.fixture
def forecast_payload():
    return {
        'cod': '200',
        'cnt': 3,
        'list': [
            forecast_item('2024-01-01 09:00:00', 10, 2, 'clear', '01d'),
            forecast_item('2024-01-01 12:00:00', 15, 0, 'cloudy', '03d'),
            forecast_item('2024-01-02 00:00:00', 8, -1, 'rain', '10n'),
        ],
    }
