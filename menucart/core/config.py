from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    CATALOG_BASE_URL: str | None = None
    CATALOG_API_KEY: str | None = None
    CATALOG_TABLE: str = "menu_items"
    CATALOG_TIMEOUT_SECONDS: float = 10.0

    CATALOG_FEED: str = "webhook"  # "webhook" | "polling"
    CATALOG_POLL_INTERVAL_SECONDS: float = 5.0
    CATALOG_WEBHOOK_SECRET: str | None = None
    CATALOG_WEBHOOK_TOLERANCE_SECONDS: int = 300

    CART_STORE_PROVIDER: str = "json"  # "json" | "sqlite" | "memory"
    CART_DATA_DIR: str = "./data/cart"
    CART_SQLITE_PATH: str = "./data/cart.sqlite3"
    CART_STORAGE_KEY: str = "restaurant_cart"

    MENU_CATEGORIES: list[str] = ["Makanan Utama", "Minuman", "Dessert"]
    ALL_CATEGORY: str = "Semua"


settings = Settings()
