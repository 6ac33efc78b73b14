# src/main.py
# Главная точка входа FastAPI для Family Menu.
#  • Сессия: подписанная cookie (SessionMiddleware), внутри только user_id
#  • Доменные ошибки сервисов -> {"detail": {"code", "message"}} с нужным HTTP-статусом
#  • CORS: CLIENT_URL + CORS_ORIGINS (через запятую)

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from dotenv import load_dotenv
load_dotenv()

logging.basicConfig(
    level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

from src.db import engine  # noqa: E402,F401  инициализация БД/пула соединений
from src.services.errors import ServiceError, TransactionFailure  # noqa: E402

from src.routers.auth import router as auth_router  # noqa: E402
from src.routers.groups import router as groups_router  # noqa: E402
from src.routers.group_members import router as group_members_router  # noqa: E402
from src.routers.group_invites import router as group_invites_router  # noqa: E402
from src.routers.menu import router as menu_router  # noqa: E402
from src.routers.meal_plans import router as meal_plans_router  # noqa: E402
from src.routers.share import router as share_router  # noqa: E402

DEFAULT_SESSION_SECRET = "dev-secret-change-me"

CLIENT_URL = os.getenv("CLIENT_URL") or "http://localhost:3001"
SESSION_SECRET = os.getenv("SESSION_SECRET") or DEFAULT_SESSION_SECRET
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE") or 86400)

if SESSION_SECRET == DEFAULT_SESSION_SECRET:
    log.warning("SESSION_SECRET is not set, using the development default")


def _cors_origins():
    extra = [o.strip() for o in (os.getenv("CORS_ORIGINS") or "").split(",") if o.strip()]
    origins = [CLIENT_URL.rstrip("/")]
    for o in extra:
        if o not in origins:
            origins.append(o)
    return origins


app = FastAPI(
    title="Family Menu Backend",
    description="Backend для Family Menu: вход через Google, группы (домохозяйства), каталог блюд, план питания.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=SESSION_SECRET,
    max_age=SESSION_MAX_AGE,
    same_site="lax",
    https_only=os.getenv("SESSION_HTTPS_ONLY") == "1",
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    # Сбой стора вне unit_of_work (чтения, одиночные записи): текст драйвера наружу не отдаём
    log.error("store failure on %s %s", request.method, request.url.path, exc_info=exc)
    failure = TransactionFailure()
    return JSONResponse(status_code=failure.status_code, content={"detail": failure.to_detail()})


# --- Подключение роутеров ---
app.include_router(auth_router,          prefix="/api/auth",   tags=["Авторизация"])
app.include_router(groups_router,        prefix="/api/groups", tags=["Группы"])
app.include_router(group_invites_router, prefix="/api",        tags=["Приглашения"])
app.include_router(group_members_router, prefix="/api",        tags=["Участники групп"])
app.include_router(menu_router,          prefix="/api/menu",   tags=["Каталог"])
app.include_router(meal_plans_router,    prefix="/api/meals",  tags=["План питания"])
app.include_router(share_router,         prefix="/api/share",  tags=["Публичные ссылки"])


@app.get("/api/health")
def health():
    """Простой healthcheck."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("src.main:app", host="0.0.0.0", port=int(os.getenv("PORT") or 3000), reload=False)
