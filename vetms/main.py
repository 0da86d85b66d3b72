# vetms/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from vetms.api.clients import router as clients_router
from vetms.api.invoices import router as invoices_router
from vetms.api.pets import router as pets_router
from vetms.api.products import router as products_router
from vetms.api.settings import router as settings_router
from vetms.config import get_settings
from vetms.db.engine import get_engine
from vetms.db.migrate import ensure_schema
from vetms.errors import VetmsError
from vetms.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    ensure_schema(get_engine())
    yield


app = FastAPI(
    title="VetMS invoice API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(VetmsError)
async def vetms_error_handler(request: Request, exc: VetmsError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    issues = []
    for err in exc.errors():
        # drop the leading "body"/"query"/"path" segment
        loc = [str(part) for part in err.get("loc", ())[1:]]
        issues.append({"field": ".".join(loc), "message": err.get("msg", "")})

    logger.warning("%s %s -> 400: %s", request.method, request.url.path, issues)
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "issues": issues},
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("%s %s failed", request.method, request.url.path, exc_info=exc)
    message = str(getattr(exc, "orig", None) or exc)
    return JSONResponse(status_code=500, content={"detail": message})


@app.get("/health")
def health_check():
    return {"status": "ok"}

app.include_router(invoices_router)
app.include_router(clients_router)
app.include_router(pets_router)
app.include_router(products_router)
app.include_router(settings_router)
