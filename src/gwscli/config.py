"""
Runtime configuration.
Everything comes from the environment with sane defaults so the tools
work with no setup beyond the credential files.
"""
from pathlib import Path
from zoneinfo import ZoneInfo

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CREDENTIALS_DIR = Path.home() / ".openclaw" / "credentials"
DEFAULT_TIMEZONE = "Asia/Bangkok"
DEFAULT_LOG_LEVEL = "WARNING"

CLIENT_FILE_NAME = "google-oauth-client.json"
TOKEN_FILE_NAME = "google-token.json"
GMAIL_CONFIG_FILE_NAME = "gmail-config.json"


class Settings(BaseSettings):
    """
    Paths and defaults shared by every tool, read from GWSCLI_* variables.
    credentials_dir holds the OAuth client descriptor, the token and
    the optional gmail config.
    """
    model_config = SettingsConfigDict(
        env_prefix="GWSCLI_",
        case_sensitive=False,
        extra="ignore",
    )

    credentials_dir: Path = Field(default=DEFAULT_CREDENTIALS_DIR)
    timezone: str = Field(default=DEFAULT_TIMEZONE)
    log_level: str = Field(default=DEFAULT_LOG_LEVEL)

    @field_validator("credentials_dir")
    @classmethod
    def expand_credentials_dir(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def client_file(self) -> Path:
        return self.credentials_dir / CLIENT_FILE_NAME

    @property
    def token_file(self) -> Path:
        return self.credentials_dir / TOKEN_FILE_NAME

    @property
    def gmail_config_file(self) -> Path:
        return self.credentials_dir / GMAIL_CONFIG_FILE_NAME

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class GmailConfig(BaseModel):
    """
    Optional per installation gmail settings.
    The file keys are camelCase:
        signature, fromName, warnOnPlaceholders, blockOnPlaceholders
    Booleans accept the usual JSON and string spellings ("false", "off", 0).
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    signature: str = Field(default="")
    from_name: str = Field(default="", alias="fromName")
    warn_on_placeholders: bool = Field(default=True, alias="warnOnPlaceholders")
    block_on_placeholders: bool = Field(default=True, alias="blockOnPlaceholders")

    @field_validator("signature", "from_name", mode="before")
    @classmethod
    def null_is_empty(cls, v):
        return "" if v is None else v

    @classmethod
    def load(cls, path: Path|str) -> "GmailConfig":
        """
        Read the config file, a missing file means all defaults.
        Anything that isn't a JSON object of the right types raises
        pydantic's ValidationError (a ValueError).
        """
        p = path if isinstance(path, Path) else Path(str(path))
        if not (p.exists() and p.is_file()):
            logger.debug(f"no gmail config at {p}, using defaults")
            return cls()
        config = cls.model_validate_json(p.read_text(encoding="utf-8"))
        logger.debug(f"loaded gmail config from {p}")
        return config
