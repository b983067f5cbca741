# backend/tests/test_settings.py
import pytest

from mailrelay import main as main_module
from mailrelay.core.settings import ConfigError, load_settings

REQUIRED = {
    "MAILGUN_API_KEY": "key-test",
    "MAILGUN_DOMAIN": "mg.example.org",
    "MAILGUN_TO_ADDRESS": "inbox@example.org",
    "MAILGUN_REDIRECT_URL": "https://example.org/thanks",
}
OPTIONAL = [
    "MAILGUN_FROM_ADDRESS",
    "MAILGUN_API_BASE",
    "MAILGUN_TIMEOUT",
    "MAIL_PROVIDER",
    "BIND_ADDRESS",
    "PORT",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in list(REQUIRED) + OPTIONAL:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_reads_environment_with_defaults(clean_env):
    for name, value in REQUIRED.items():
        clean_env.setenv(name, value)

    settings = load_settings(_env_file=None)

    assert settings.mailgun_domain == "mg.example.org"
    assert settings.redirect_url == "https://example.org/thanks"
    assert settings.mailgun_from_address is None
    assert settings.bind_address == "0.0.0.0"
    assert settings.port == 8088
    assert settings.mailgun_timeout == 10.0
    assert settings.messages_url == "https://api.mailgun.net/v3/mg.example.org/messages"


def test_settings_are_immutable(clean_env):
    for name, value in REQUIRED.items():
        clean_env.setenv(name, value)
    settings = load_settings(_env_file=None)

    with pytest.raises(Exception):
        settings.port = 9000


@pytest.mark.parametrize("missing", list(REQUIRED))
def test_missing_required_variable_is_named(clean_env, missing):
    for name, value in REQUIRED.items():
        if name != missing:
            clean_env.setenv(name, value)

    with pytest.raises(ConfigError) as exc_info:
        load_settings(_env_file=None)

    assert f'Environment variable "{missing}" must be present' in str(exc_info.value)


def test_invalid_values_are_reported(clean_env):
    for name, value in REQUIRED.items():
        clean_env.setenv(name, value)
    clean_env.setenv("PORT", "not-a-port")
    clean_env.setenv("LOG_LEVEL", "chatty")

    with pytest.raises(ConfigError) as exc_info:
        load_settings(_env_file=None)

    message = str(exc_info.value)
    assert '"PORT" is invalid' in message
    assert '"LOG_LEVEL" is invalid' in message


def test_malformed_api_base_fails_at_startup(clean_env):
    for name, value in REQUIRED.items():
        clean_env.setenv(name, value)
    clean_env.setenv("MAILGUN_API_BASE", "http://[::1")

    with pytest.raises(ConfigError) as exc_info:
        load_settings(_env_file=None)

    assert '"MAILGUN_API_BASE" is invalid' in str(exc_info.value)


def test_eu_api_base_builds_messages_url(clean_env):
    for name, value in REQUIRED.items():
        clean_env.setenv(name, value)
    clean_env.setenv("MAILGUN_API_BASE", "https://api.eu.mailgun.net/v3/")

    settings = load_settings(_env_file=None)

    assert settings.messages_url == "https://api.eu.mailgun.net/v3/mg.example.org/messages"


def test_main_exits_when_configuration_missing(clean_env):
    clean_env.setattr(main_module, "load_settings", lambda: load_settings(_env_file=None))
    served = []
    clean_env.setattr(main_module.uvicorn, "run", lambda *a, **kw: served.append(a))

    with pytest.raises(SystemExit) as exc_info:
        main_module.main()

    assert exc_info.value.code != 0
    assert "MAILGUN_API_KEY" in str(exc_info.value.code)
    assert served == []


def test_main_serves_with_configured_bind(clean_env):
    for name, value in REQUIRED.items():
        clean_env.setenv(name, value)
    clean_env.setenv("PORT", "9090")
    clean_env.setattr(main_module, "load_settings", lambda: load_settings(_env_file=None))
    calls = []
    clean_env.setattr(main_module.uvicorn, "run", lambda app, **kw: calls.append(kw))

    main_module.main()

    assert calls[0]["host"] == "0.0.0.0"
    assert calls[0]["port"] == 9090
    assert calls[0]["log_level"] == "info"
