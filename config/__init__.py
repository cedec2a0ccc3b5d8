import os

_SETTINGS_BY_ENV = {
    "dev": "config.development",
    "development": "config.development",
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Dotted path of the settings module chosen by APP_ENV (development when unset)."""
    env = os.getenv("APP_ENV", "development").strip().lower()
    try:
        return _SETTINGS_BY_ENV[env]
    except KeyError:
        raise RuntimeError(f"Unknown APP_ENV {env!r}; use one of {sorted(_SETTINGS_BY_ENV)}") from None
