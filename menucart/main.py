import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from menucart.api.v1.menu import router as menu_router
from menucart.api.webhooks import router as webhooks_router
from menucart.core.config import settings
from menucart.wiring.dependencies import get_session


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("item_id", "quantity", "item_count", "subscribers", "key", "status", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    session = get_session()
    await session.start()
    try:
        yield
    finally:
        await session.aclose()


configure_logging()

app = FastAPI(title="Menu Cart", version="1.0.0", lifespan=lifespan)

app.include_router(menu_router, prefix="/api/v1", tags=["menu"])
app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
