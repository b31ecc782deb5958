from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Redis (snapshot store; defaults match a local redis-server)
    REDIS_URL: str = "redis://localhost:6379/0"
    SNAPSHOT_KEY: str = "trigger-ladder:state"
    SNAPSHOT_MAX_AGE_SECONDS: int = 3600
    SNAPSHOT_EVERY_TICKS: int = 100  # ~5s at the default 20 Hz

    # Tick source
    TICK_INTERVAL_MS: int = 50  # 20 Hz, clamped to [20, 200] by the runner
    INITIAL_PRICE: str = "2006.16"
    VOLATILITY: float = 0.0005
    SPIKE_CHANCE: float = 0.02
    SPIKE_MULTIPLIER: float = 3.0
    PRICE_HISTORY_LIMIT: int = 500

    # Ladder defaults
    DEFAULT_TICK_SIZE: str = "0.05"
    DEFAULT_LEVELS_PER_SIDE: int = 12
    MIN_RECALC_INTERVAL_MS: int = 200  # at most ~5 recalculations per second
    RECALC_DRIFT_TICKS: int = 2

    # App
    APP_NAME: str = "Trigger Ladder"
    DEBUG: bool = False


settings = Settings()
