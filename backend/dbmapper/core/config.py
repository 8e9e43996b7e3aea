"""
Runtime settings for dbmapper (pydantic-settings).

Values come from the environment or a local ``.env`` file. Modules read
``settings.X`` at call time, so tests patch ``<module>.settings``.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Connection pool (core.pool.manager)
    EXTERNAL_DB_POOL_SIZE: int = 5
    EXTERNAL_DB_POOL_MAX_AGE_SEC: int = 600

    # Driver timeouts, in seconds
    EXTERNAL_DB_CONNECT_TIMEOUT: int = 10
    EXTERNAL_DB_STATEMENT_TIMEOUT: int | None = None

    # Transaction defaults (transaction.datasource)
    TRANSACTION_TIMEOUT: int | None = None
    TRANSACTION_AUTOCOMMIT: bool = False


settings = Settings()
