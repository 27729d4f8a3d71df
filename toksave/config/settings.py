import json
import os
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config.json")


class UpstreamConfig(BaseModel):
    endpoint: str = Field(
        default="https://tiktok-download-video-no-watermark.p.rapidapi.com/tiktok/info",
        description="Video info endpoint"
    )
    api_host: str = Field(
        default="tiktok-download-video-no-watermark.p.rapidapi.com",
        description="Value of the x-rapidapi-host header"
    )
    api_key: str = Field(default="", description="Value of the x-rapidapi-key header")
    timeout_seconds: float = Field(default=15.0, gt=0, description="Upstream request timeout in seconds")


class HistoryConfig(BaseModel):
    max_size: int = Field(default=15, ge=1, description="Max entries kept in history")
    storage_key: str = Field(default="toksave_history", description="Key the history is stored under")
    backend: str = Field(default="file", description="History backend (file, redis, memory)")
    file_path: str = Field(default="data/history.json", description="History file for the file backend")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v):
        valid_backends = ["file", "redis", "memory"]
        if v.lower() not in valid_backends:
            raise ValueError(f"History backend must be one of {valid_backends}")
        return v.lower()


class RedisConfig(BaseModel):
    url: str = Field(default="redis://localhost:6379", description="Redis connection URL")
    socket_timeout: int = Field(default=5, description="Redis socket timeout in seconds")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class ApiConfig(BaseModel):
    title: str = Field(default="TokSave API", description="API title")
    description: str = Field(default="Watermark-free TikTok link retrieval", description="API description")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")


class EnvOverrides(BaseSettings):
    """Environment variables that override the defaults when no config file exists"""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    rapidapi_key: Optional[str] = None
    rapidapi_host: Optional[str] = None
    upstream_endpoint: Optional[str] = None
    upstream_timeout: Optional[float] = None
    history_backend: Optional[str] = None
    history_file: Optional[str] = None
    history_max_size: Optional[int] = None
    redis_url: Optional[str] = None
    log_level: Optional[str] = None
    default_locale: Optional[str] = None


class Config(BaseModel):
    """Main configuration model"""
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def load_from_file(cls, config_path: str = "config.json") -> "Config":
        """Load configuration from JSON file"""
        if os.path.exists(config_path):
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    config_data = json.load(f)
                logger.info(f"Configuration loaded from {config_path}")
                return cls(**config_data)
            except Exception as e:
                logger.error(f"Failed to load config from {config_path}: {str(e)}")
                logger.info("Using default configuration")
        else:
            logger.warning(f"Config file {config_path} not found, using defaults")

        return cls()

    @classmethod
    def load_from_env(cls) -> "Config":
        """Load configuration from environment variables (fallback)"""
        env = EnvOverrides()
        config_data: Dict[str, Dict[str, Any]] = {}

        upstream = {}
        if env.rapidapi_key:
            upstream["api_key"] = env.rapidapi_key
        if env.rapidapi_host:
            upstream["api_host"] = env.rapidapi_host
        if env.upstream_endpoint:
            upstream["endpoint"] = env.upstream_endpoint
        if env.upstream_timeout is not None:
            upstream["timeout_seconds"] = env.upstream_timeout
        if upstream:
            config_data["upstream"] = upstream

        history = {}
        if env.history_backend:
            history["backend"] = env.history_backend
        if env.history_file:
            history["file_path"] = env.history_file
        if env.history_max_size is not None:
            history["max_size"] = env.history_max_size
        if history:
            config_data["history"] = history

        if env.redis_url:
            config_data["redis"] = {"url": env.redis_url}

        if env.log_level:
            config_data["logging"] = {"level": env.log_level}

        if env.default_locale:
            config_data["i18n"] = {"default_locale": env.default_locale}

        return cls(**config_data) if config_data else cls()


def load_config() -> Config:
    """Load configuration with priority: config.json > env vars > defaults"""
    if os.path.exists(CONFIG_PATH):
        return Config.load_from_file(CONFIG_PATH)
    else:
        logger.info(f"Config file not found at {CONFIG_PATH}, checking environment variables")
        return Config.load_from_env()


config = load_config()
