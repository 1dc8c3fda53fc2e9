import os

_ALIASES = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Settings module for this process.

    SETTINGS_MODULE wins when set; otherwise APP_ENV picks one of the
    bundled modules, defaulting to development.
    """

    explicit = os.getenv("SETTINGS_MODULE")
    if explicit:
        return explicit

    env = os.getenv("APP_ENV", "development").lower()
    return _ALIASES.get(env, "config.development")
