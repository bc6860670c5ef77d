import logging

from menucart.application.ports.catalog_source import CatalogSourcePort
from menucart.application.ports.change_feed import ChangeFeedPort
from menucart.application.ports.key_value_store import KeyValueStorePort
from menucart.application.use_cases.cart_store import CartStore
from menucart.application.use_cases.catalog_mirror import CatalogMirror
from menucart.application.use_cases.menu_session import MenuSession
from menucart.core.config import settings
from menucart.infrastructure.catalog.http_catalog_client import HttpCatalogSource
from menucart.infrastructure.catalog.mock_catalog import MockCatalogSource
from menucart.infrastructure.feed.catalog_signature import CatalogWebhookVerifier
from menucart.infrastructure.feed.memory_feed import InMemoryChangeFeed
from menucart.infrastructure.feed.polling_feed import PollingChangeFeed
from menucart.infrastructure.store.json_store import JsonFileKeyValueStore
from menucart.infrastructure.store.memory_store import MemoryKeyValueStore
from menucart.infrastructure.store.sqlite_store import SqliteKeyValueStore

_session: MenuSession | None = None
_webhook_feed: InMemoryChangeFeed | None = None


def get_key_value_store() -> KeyValueStorePort:
    provider = settings.CART_STORE_PROVIDER.lower()
    if provider == "sqlite":
        return SqliteKeyValueStore(db_path=settings.CART_SQLITE_PATH)
    if provider == "memory":
        return MemoryKeyValueStore()
    return JsonFileKeyValueStore(data_dir=settings.CART_DATA_DIR)


def get_catalog_source() -> CatalogSourcePort:
    logger = logging.getLogger(__name__)
    if not settings.CATALOG_BASE_URL:
        if settings.ENV.lower() in {"dev", "local"}:
            logger.info("Using MockCatalogSource (CATALOG_BASE_URL missing, ENV=dev/local)")
            return MockCatalogSource()
        raise ValueError("CATALOG_BASE_URL is required outside dev/local.")
    logger.info("Using HttpCatalogSource")
    return HttpCatalogSource()


def get_webhook_feed() -> InMemoryChangeFeed:
    global _webhook_feed
    if _webhook_feed is None:
        _webhook_feed = InMemoryChangeFeed()
    return _webhook_feed


def get_webhook_verifier() -> CatalogWebhookVerifier:
    return CatalogWebhookVerifier(
        secret=settings.CATALOG_WEBHOOK_SECRET,
        env=settings.ENV,
        tolerance=settings.CATALOG_WEBHOOK_TOLERANCE_SECONDS,
    )


def get_change_feed(source: CatalogSourcePort) -> ChangeFeedPort:
    if settings.CATALOG_FEED.lower() == "polling":
        return PollingChangeFeed(source, interval=settings.CATALOG_POLL_INTERVAL_SECONDS)
    return get_webhook_feed()


def build_session() -> MenuSession:
    source = get_catalog_source()
    mirror = CatalogMirror(source=source, feed=get_change_feed(source))
    cart = CartStore(storage=get_key_value_store(), key=settings.CART_STORAGE_KEY)
    return MenuSession(
        mirror=mirror,
        cart=cart,
        categories=settings.MENU_CATEGORIES,
        all_category=settings.ALL_CATEGORY,
    )


def get_session() -> MenuSession:
    global _session
    if _session is None:
        _session = build_session()
    return _session


def reset_session() -> None:
    global _session, _webhook_feed
    _session = None
    _webhook_feed = None
