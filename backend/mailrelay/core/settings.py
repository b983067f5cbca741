# mailrelay/core/settings.py
from typing import Optional

from pydantic import AnyHttpUrl, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised at startup when the environment can't produce usable settings."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
        frozen=True,
    )

    # Mailgun credentials + where the mail goes
    mailgun_api_key: str = Field(min_length=1, alias="MAILGUN_API_KEY")
    mailgun_domain: str = Field(min_length=1, alias="MAILGUN_DOMAIN")
    mailgun_to_address: str = Field(min_length=1, alias="MAILGUN_TO_ADDRESS")
    redirect_url: str = Field(min_length=1, alias="MAILGUN_REDIRECT_URL")

    # If unset, mail is sent "from" the person who filled in the form
    mailgun_from_address: Optional[str] = Field(default=None, alias="MAILGUN_FROM_ADDRESS")

    # EU accounts live at https://api.eu.mailgun.net/v3
    mailgun_api_base: AnyHttpUrl = Field(
        default="https://api.mailgun.net/v3", validate_default=True, alias="MAILGUN_API_BASE"
    )
    mailgun_timeout: float = Field(default=10.0, gt=0, alias="MAILGUN_TIMEOUT")

    # Mail provider: "mailgun" or "log" (dev, nothing leaves the box)
    mail_provider: str = Field(default="mailgun", alias="MAIL_PROVIDER")

    bind_address: str = Field(default="0.0.0.0", alias="BIND_ADDRESS")
    port: int = Field(default=8088, ge=1, le=65535, alias="PORT")
    log_level: str = Field(
        default="info",
        pattern=r"(?i)^(critical|error|warning|info|debug)$",
        alias="LOG_LEVEL",
    )

    @property
    def messages_url(self) -> str:
        return f"{str(self.mailgun_api_base).rstrip('/')}/{self.mailgun_domain}/messages"


def _env_name(loc) -> str:
    name = str(loc[0]) if loc else "?"
    field = Settings.model_fields.get(name)
    if field is not None and field.alias:
        return field.alias
    return name.upper()


def load_settings(**overrides) -> Settings:
    """Build Settings from the environment, turning validation noise into one readable error."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = []
        for err in exc.errors():
            env_name = _env_name(err.get("loc"))
            if err.get("type") == "missing":
                problems.append(f'Environment variable "{env_name}" must be present')
            else:
                problems.append(f'Environment variable "{env_name}" is invalid: {err.get("msg")}')
        raise ConfigError("; ".join(problems)) from exc
