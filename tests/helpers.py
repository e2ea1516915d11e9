from datetime import datetime, timedelta
from unittest.mock import MagicMock

from server.contracts import ForecastSample


def forecast_item(dt_txt, temp_max, temp_min, description='clear sky', icon='01d'):
    return {
        'dt_txt': dt_txt,
        'main': {'temp_max': temp_max, 'temp_min': temp_min},
        'weather': [{'description': description, 'icon': icon}],
    }


def sample(dt_txt, temp_max, temp_min, description='clear sky', icon='01d'):
    return ForecastSample.from_payload(
        forecast_item(dt_txt, temp_max, temp_min, description, icon)
    )


def three_hour_series(start, count, temp=10.0):
    """``count`` samples, 3 hours apart, starting at ``start``."""
    first = datetime.strptime(start, '%Y-%m-%d %H:%M:%S')
    return [
        forecast_item(
            (first + timedelta(hours=3 * i)).strftime('%Y-%m-%d %H:%M:%S'),
            temp + i % 8,
            temp - i % 8,
        )
        for i in range(count)
    ]


def json_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json = MagicMock(return_value=payload)
    return response
