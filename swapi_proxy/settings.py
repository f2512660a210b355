import os

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

load_dotenv()


class Settings(BaseModel):
    # Upstream SWAPI Configuration
    swapi_base_url: str = Field(
        default="https://www.swapi.tech/api", alias="SWAPI_BASE_URL"
    )
    page_size: int = Field(default=10, alias="SWAPI_PAGE_SIZE")
    request_timeout: float = Field(default=30.0, alias="SWAPI_REQUEST_TIMEOUT")

    # Cache Configuration
    character_cache_ttl: int = Field(default=600, alias="CHARACTER_CACHE_TTL")
    cache_max_size: int = Field(default=100, ge=0, alias="CACHE_MAX_SIZE")  # 0 = no cap

    # Fan-out Configuration (0 = unbounded)
    fanout_limit: int = Field(default=0, ge=0, alias="FANOUT_LIMIT")
    single_flight: bool = Field(default=False, alias="SINGLE_FLIGHT")

    # HTTP Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    api_prefix: str = Field(default="api", alias="API_PREFIX")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def load_settings() -> Settings:
    """Build settings from the process environment (and .env).

    Only the variables named by field aliases are read. A variable that
    fails validation is logged and replaced by the field default.
    """
    aliases = {field.alias for field in Settings.model_fields.values()}
    values = {key: value for key, value in os.environ.items() if key in aliases}

    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        invalid = {str(error["loc"][0]) for error in e.errors() if error["loc"]}
        logger.warning(f"Ignoring invalid settings, using defaults: {sorted(invalid)}")
        return Settings.model_validate(
            {key: value for key, value in values.items() if key not in invalid}
        )


global_settings = load_settings()
