import os


class Config:
    # Store location; any SQLAlchemy URL. SQLite file by default for local runs.
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cardshop.db")

    # Connection pool (non-SQLite backends). Checkout waits at most DB_POOL_TIMEOUT seconds.
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "0"))
    DB_POOL_TIMEOUT = float(os.getenv("DB_POOL_TIMEOUT", "5"))
    DB_BUSY_TIMEOUT_MS = int(os.getenv("DB_BUSY_TIMEOUT_MS", "5000"))

    # Liveness ping against the store, 0 disables
    KEEPALIVE_INTERVAL_SECONDS = float(os.getenv("KEEPALIVE_INTERVAL_SECONDS", "300"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    ENABLE_TEST_ROUTES = os.getenv("ENABLE_TEST_ROUTES", "") in ("1", "true", "yes")
