from unittest.mock import patch

import pytest

from jobrelay.config.settings import WORKER_PATH, Settings, get_settings


def test_default_settings():
    """Test default settings values."""
    settings = Settings(_env_file=None)

    assert settings.app_name == "Job Relay"
    assert settings.version == "1.0.0"
    assert settings.environment == "development"
    assert settings.queue_url == "https://qstash.upstash.io"
    assert settings.queue_signature_header == "Upstash-Signature"
    assert settings.queue_max_retries is None


def test_callback_url_derived_from_base_url():
    settings = Settings(app_base_url="https://app.example.com/", worker_callback_url=None)

    assert settings.callback_url == "https://app.example.com" + WORKER_PATH


def test_callback_url_override_wins():
    settings = Settings(
        app_base_url="https://app.example.com",
        worker_callback_url="https://hooks.example.com/worker",
    )

    assert settings.callback_url == "https://hooks.example.com/worker"


def test_callback_url_missing():
    settings = Settings(app_base_url=None, worker_callback_url=None)

    assert settings.callback_url is None


def test_signing_keys_current_first():
    settings = Settings(queue_current_signing_key="cur", queue_next_signing_key="nxt")

    assert settings.signing_keys == ["cur", "nxt"]


def test_production_requires_signing_key():
    """Test that production environment refuses to run without a signing key."""
    with pytest.raises(ValueError, match="required in production"):
        Settings(
            environment="production",
            queue_current_signing_key=None,
            queue_next_signing_key=None,
        )


def test_production_accepts_next_key_only():
    settings = Settings(
        environment="production",
        queue_current_signing_key=None,
        queue_next_signing_key="nxt",
    )

    assert settings.signing_keys == ["nxt"]


def test_settings_dependency_injection():
    """Test the get_settings dependency function."""
    settings = get_settings()
    assert isinstance(settings, Settings)


@patch.dict(
    "os.environ",
    {
        "QSTASH_TOKEN": "env-token",
        "QSTASH_CURRENT_SIGNING_KEY": "env-current",
        "QSTASH_NEXT_SIGNING_KEY": "env-next",
        "NEXT_PUBLIC_APP_URL": "https://env.example.com",
    },
)
def test_provider_env_var_names_are_recognized():
    """Test that the queue provider's own variable names are loaded."""
    settings = Settings()

    assert settings.queue_token == "env-token"
    assert settings.signing_keys == ["env-current", "env-next"]
    assert settings.app_base_url == "https://env.example.com"


@patch.dict("os.environ", {"QUEUE_TOKEN": "generic-token", "QUEUE_MAX_RETRIES": "3"})
def test_generic_env_var_names_are_recognized():
    settings = Settings()

    assert settings.queue_token == "generic-token"
    assert settings.queue_max_retries == 3
