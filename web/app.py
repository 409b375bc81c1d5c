"""
FastAPI 애플리케이션

라우터 등록, 예외 매핑 및 앱 설정.
커넥션 풀은 lifespan에서 생성/종료 (프로세스 전역 싱글톤 없음).
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.pool import ConnectionPool
from core.config.loader import AppSettings, get_settings
from core.errors import NotFoundError, StorageError, TransientStorageError, ValidationError
from core.ledger.schema import init_ledger_schema
from core.ledger.service import LedgerService
from web.routes import accounts, finance, health, projects, transactions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리

    시작 시 풀 연결 + 스키마 초기화, 종료 시 풀 종료.
    """
    settings: AppSettings = app.state.settings
    db_config = settings.database

    pool = ConnectionPool(
        db_config.path,
        max_size=db_config.pool_max_size,
        acquire_timeout=db_config.acquire_timeout_sec,
        busy_timeout_ms=db_config.busy_timeout_ms,
        transient_signatures=db_config.transient_signatures,
    )
    await pool.connect()
    await init_ledger_schema(pool)

    app.state.ledger_service = LedgerService(pool, settings.retry)
    logger.info("Admin API 시작", extra={"db_path": str(db_config.path)})

    try:
        yield
    finally:
        await pool.close()
        logger.info("Admin API 종료")


# =========================================================================
# 예외 → HTTP 상태 매핑
# =========================================================================

async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": exc.message})


async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.message})


async def _transient_storage_handler(request: Request, exc: TransientStorageError) -> JSONResponse:
    logger.warning(f"DB 일시적 끊김 (재시도 소진): {request.url.path}", extra={"error": exc.message})
    return JSONResponse(status_code=503, content={"detail": exc.message})


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(f"DB 오류: {request.url.path}", extra={"error": exc.message})
    return JSONResponse(status_code=500, content={"detail": exc.message})


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """FastAPI 앱 생성

    Args:
        settings: 애플리케이션 설정 (None이면 settings.yaml에서 로드)
    """
    app = FastAPI(
        title="Ledger Admin API",
        description="거래처 원장 및 정산 API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()

    # CORS 설정 (개발용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(TransientStorageError, _transient_storage_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)

    # =====================================================================
    # API 라우터 등록
    # =====================================================================

    app.include_router(health.router)
    app.include_router(accounts.router)
    app.include_router(projects.router)
    app.include_router(transactions.router)
    app.include_router(finance.router)

    return app
