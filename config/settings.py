from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSetting(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='APP_',
        env_file='.env',
        extra='ignore',
        populate_by_name=True,
    )

    log_level: str = 'DEBUG'
    api_prefix: str = '/api/v1'
    enable_file_logging: bool = False
    log_file_path: str = 'app.log'

    # an empty key is sent as-is and rejected by the remote service
    openweather_api_key: str = Field(
        default='',
        validation_alias=AliasChoices(
            'OPENWEATHER_API_KEY', 'APP_OPENWEATHER_API_KEY'
        ),
    )
    geocoding_url: str = 'https://api.openweathermap.org/geo/1.0/direct'
    forecast_url: str = 'https://api.openweathermap.org/data/2.5/forecast'
    icon_base_url: str = 'https://openweathermap.org/img/wn'

    default_city: str = 'Shanghai'
    forecast_days: int = 7
    drop_partial_days: bool = False
    search_on_startup: bool = True


app_settings = AppSetting()
