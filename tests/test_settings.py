from unittest.mock import patch

import pytest

from config.settings import AppSetting
from server.api.weather import ForecastAggregator, LocationResolver

from tests.helpers import json_response


API_KEY_VARIABLES = ('OPENWEATHER_API_KEY', 'APP_OPENWEATHER_API_KEY')


@pytest.fixture
def clean_env(monkeypatch):
    for name in API_KEY_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_api_key_defaults_to_empty(clean_env):
    settings = AppSetting(_env_file=None)
    assert settings.openweather_api_key == ''


@pytest.mark.parametrize('variable', API_KEY_VARIABLES)
def test_api_key_from_environment(clean_env, variable):
    clean_env.setenv(variable, 'secret-key')

    settings = AppSetting(_env_file=None)

    assert settings.openweather_api_key == 'secret-key'


def test_prefixed_settings_from_environment(clean_env):
    clean_env.setenv('APP_API_PREFIX', '/weather-api')
    clean_env.setenv('APP_DROP_PARTIAL_DAYS', 'true')

    settings = AppSetting(_env_file=None)

    assert settings.api_prefix == '/weather-api'
    assert settings.drop_partial_days is True


@pytest.mark.asyncio
async def test_api_key_is_sent_as_appid(clean_env, geocoding_payload, forecast_payload):
    clean_env.setenv('OPENWEATHER_API_KEY', 'secret-key')
    settings = AppSetting(_env_file=None)
    resolver = LocationResolver(settings.geocoding_url, settings.openweather_api_key)
    aggregator = ForecastAggregator(
        settings.forecast_url, settings.openweather_api_key
    )

    with patch(
        'httpx.AsyncClient.get',
        side_effect=[
            json_response(geocoding_payload),
            json_response(forecast_payload),
        ],
    ) as mock_get:
        match = await resolver.resolve('Shanghai')
        await aggregator.aggregate(match.latitude, match.longitude)

    geocoding_call, forecast_call = mock_get.call_args_list
    assert geocoding_call.args[0] == settings.geocoding_url
    assert geocoding_call.kwargs['params']['appid'] == 'secret-key'
    assert forecast_call.args[0] == settings.forecast_url
    assert forecast_call.kwargs['params']['appid'] == 'secret-key'


@pytest.mark.asyncio
async def test_missing_api_key_is_sent_empty(clean_env, geocoding_payload):
    settings = AppSetting(_env_file=None)
    resolver = LocationResolver(settings.geocoding_url, settings.openweather_api_key)

    with patch(
        'httpx.AsyncClient.get', return_value=json_response(geocoding_payload)
    ) as mock_get:
        await resolver.resolve('Shanghai')

    assert mock_get.call_args.kwargs['params']['appid'] == ''
