import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.artists import router as artists_router
from app.api.v1.auth import router as auth_router
from app.api.v1.contractors import router as contractors_router
from app.api.v1.events import router as events_router
from app.api.v1.local_partners import router as local_partners_router
from app.api.v1.notifications import router as notifications_router
from app.api.v1.permissions import router as permissions_router
from app.api.v1.reports import router as reports_router
from app.api.v1.users import router as users_router
from app.core.config import settings
from app.core.errors import PreconditionError
from app.db.session import create_store
from app.services.storage import StorageError

if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO)

logger = logging.getLogger("agenda")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.ENV.lower() == "production":
        if settings.SECRET_KEY == "dev-secret-change-me":
            logger.warning("SECRET_KEY esta usando valor padrao em producao.")
        if settings.LOCAL_STORE:
            logger.warning("LOCAL_STORE=1 em producao: dados nao serao persistidos.")
        if not settings.OWNER_OPEN_ID:
            logger.warning("OWNER_OPEN_ID nao definido.")
    store = create_store(settings)
    store.initialize()
    app.state.store = store
    try:
        yield
    finally:
        store.close()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Agenda de shows - artistas, contratantes, eventos e relatorios",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api")
app.include_router(artists_router, prefix="/api")
app.include_router(contractors_router, prefix="/api")
app.include_router(local_partners_router, prefix="/api")
app.include_router(events_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(permissions_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")
app.include_router(reports_router, prefix="/api")


@app.exception_handler(PreconditionError)
def precondition_error_handler(request: Request, exc: PreconditionError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(StorageError)
def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Erro interno path=%s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Ocorreu um erro, tente novamente mais tarde"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "request method=%s path=%s status=%s duration_ms=%.2f",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.get("/health")
@app.get("/api/health")
def health():
    return {"ok": True}
