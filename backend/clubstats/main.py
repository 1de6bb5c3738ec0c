from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from clubstats.api.routes.highlights import router as highlights_router
from clubstats.api.routes.stats import router as stats_router
from clubstats.core.app_logger import get_logger, setup_logging
from clubstats.core.errors import EngineError
from clubstats.db.init_db import init_db

setup_logging()
logger = get_logger(__name__)

app = FastAPI(title="Club Stats")
app.include_router(stats_router)
app.include_router(highlights_router)


@app.on_event("startup")
def on_startup():
    init_db()


@app.exception_handler(EngineError)
def engine_error_handler(request: Request, exc: EngineError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "error": exc.kind})


@app.get("/health")
def health():
    return {"ok": True}
