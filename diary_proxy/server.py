"""
Diary Proxy Server
==================
Прокси между фронтендом дневника и OpenRouter. Ключ OpenRouter остаётся на
сервере, запросы и ответы нигде не сохраняются и не логируются.

Запуск: python server.py
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .admin_auth import issue_token, require_admin, secrets_equal
from .logs import configure as configure_log, log
from .schemas import AccountSummary, ChatRequest, LoginRequest, UsageSummary
from .settings import Settings
from .upstream import OpenRouterClient, UpstreamError

router = APIRouter()


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def log_upstream_failure(prefix: str, e: Exception):
    status = getattr(e, "status", None)
    log(f"{prefix} (no user data logged): timestamp={iso_now()} error={e} status={status or 'unknown'}")


def get_upstream(request: Request) -> OpenRouterClient:
    return request.app.state.upstream


async def require_frontend_key(request: Request, x_api_key: str | None = Header(default=None)):
    if not secrets_equal(x_api_key or "", request.app.state.settings.frontend_api_key):
        raise HTTPException(status_code=401, detail="Unauthorized")


def route_table() -> dict[str, str]:
    return {
        f"{method} {route.path}": route.summary
        for route in router.routes
        if isinstance(route, APIRoute) and route.summary
        for method in sorted(route.methods)
    }


@router.post("/api/chat", summary="Secure proxy to OpenRouter", dependencies=[Depends(require_frontend_key)])
async def chat(request: Request, upstream: OpenRouterClient = Depends(get_upstream)):
    # тело разбирается только после проверки ключа
    try:
        body = ChatRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return JSONResponse({"error": "Invalid request body"}, status_code=422)

    try:
        data = await upstream.chat_completion(body.messages, body.temperature, body.top_p)
    except UpstreamError as e:
        log_upstream_failure("API Proxy Error", e)
        return JSONResponse({"error": "Internal server error"}, status_code=500)
    return JSONResponse(content=data)


@router.post("/admin/login", summary="Admin login, returns a 24h session token")
async def admin_login(body: LoginRequest, request: Request):
    settings = request.app.state.settings
    # обе проверки всегда, чтобы время ответа не выдавало, что не совпало
    user_ok = secrets_equal(body.username, settings.admin_username)
    password_ok = secrets_equal(body.password, settings.admin_password)
    if not (user_ok and password_ok):
        log("Admin login rejected")
        return JSONResponse({"success": False, "error": "Invalid credentials"}, status_code=401)
    return {"success": True, "token": issue_token(body.username)}


@router.get("/admin/account", summary="OpenRouter account info (admin token)", dependencies=[Depends(require_admin)])
async def admin_account(upstream: OpenRouterClient = Depends(get_upstream)):
    try:
        account = AccountSummary.from_key_info(await upstream.key_info())
    except (UpstreamError, ValidationError, TypeError) as e:
        log_upstream_failure("Admin account error", e)
        return JSONResponse({"success": False, "error": "Failed to fetch account info"}, status_code=500)
    return {"success": True, "account": account}


@router.get("/admin/usage", summary="OpenRouter usage and remaining budget (admin token)", dependencies=[Depends(require_admin)])
async def admin_usage(upstream: OpenRouterClient = Depends(get_upstream)):
    try:
        usage = UsageSummary.from_key_info(await upstream.key_info())
    except (UpstreamError, ValidationError, TypeError) as e:
        log_upstream_failure("Admin usage error", e)
        return JSONResponse({"success": False, "error": "Failed to fetch usage info"}, status_code=500)
    return {"success": True, "usage": usage}


@router.get("/health", summary="Health check")
async def health():
    return {"status": "Privacy-first diary proxy is running", "timestamp": iso_now()}


@router.get("/")
async def index():
    return {
        "message": "Diary Assistant Privacy-First Proxy",
        "endpoints": route_table(),
        "privacy": "No user data is stored or logged on this server",
        "source": "https://github.com/your-username/your-repo-name",
    }


async def http_error(request: Request, exc: StarletteHTTPException):
    body = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def invalid_body(request: Request, exc: RequestValidationError):
    # без деталей pydantic: в них эхом уходит тело запроса
    return JSONResponse({"error": "Invalid request body"}, status_code=422)


async def catch_unhandled(request: Request, call_next):
    # исключение не уходит дальше в uvicorn: его traceback содержит текст ошибки
    try:
        return await call_next(request)
    except Exception as e:
        log(f"Unhandled error on {request.url.path}: {type(e).__name__}")
        return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(settings: Settings | None = None, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    if settings is None:
        settings = Settings.from_env()
    configure_log(settings.log_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.upstream.close()

    app = FastAPI(title="Diary Proxy", lifespan=lifespan)
    app.state.settings = settings
    app.state.upstream = OpenRouterClient(settings, http_client)

    # CORS снаружи, чтобы и ответ 500 шёл с заголовками
    app.middleware("http")(catch_unhandled)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(RequestValidationError, invalid_body)
    app.include_router(router)
    return app


def main():
    settings = Settings.from_env()
    print("📝 Diary Proxy")
    print(f"   Адрес:  http://localhost:{settings.port}")
    print(f"   Модель: {settings.model}")
    print("   Данные пользователей не сохраняются и не логируются")
    print("-" * 40)
    if not settings.openrouter_api_key:
        log("OPENROUTER_API_KEY не задан: запросы к OpenRouter будут отвечать 500")
    if not settings.frontend_api_key:
        log("FRONTEND_API_KEY не задан: /api/chat будет отвечать 401")
    if not settings.admin_enabled:
        log("ADMIN_USERNAME/ADMIN_PASSWORD не заданы: вход в админку закрыт")
    uvicorn.run(
        "diary_proxy.server:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level="warning",
    )


if __name__ == "__main__":
    main()
