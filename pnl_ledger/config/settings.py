"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pnl_ledger.domain import PnLMethod


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for API runtime and PnL computation defaults.

    Environment variable names map directly to field names in uppercase.
    Example: `default_pnl_method` reads from `DEFAULT_PNL_METHOD`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        default_pnl_method: PnL method applied when a request omits one.
        default_include_fees: Fee inclusion applied when a request omits it.
        batch_max_workers: Worker threads used for multi-pair computations.
        log_level: Root logging level name.
        log_json: Whether log lines are emitted as JSON.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    default_pnl_method: PnLMethod = Field(default=PnLMethod.FIFO)
    default_include_fees: bool = Field(default=True)
    batch_max_workers: int = Field(default=1, ge=1, le=64)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    @field_validator("default_pnl_method", mode="before")
    @classmethod
    def _normalize_pnl_method(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unsupported log_level={value}")
        return normalized_value

    @field_validator("environment_name")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
