"""
Сессии админки
==============
Токен = base64("<username>:<epoch millis>"). Он не подписан: подделать его
может любой, кто знает схему. Для read-only админки это приемлемо, формат
оставлен совместимым с существующим дашбордом.

Таблицы сессий нет, валидность считается из самого токена и текущего времени,
поэтому отозвать токен раньше 24 часов нельзя.
"""

import base64
import binascii
import hmac
import time

from fastapi import Header, HTTPException, Request

SESSION_TTL_MS = 24 * 60 * 60 * 1000


class InvalidToken(ValueError):
    pass


def now_ms() -> int:
    return int(time.time() * 1000)


def secrets_equal(given: str, expected: str) -> bool:
    """Сравнение за постоянное время; пустой ожидаемый секрет не совпадает ни с чем."""
    if not expected:
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def issue_token(username: str, issued_at: int | None = None) -> str:
    if issued_at is None:
        issued_at = now_ms()
    return base64.b64encode(f"{username}:{issued_at}".encode("utf-8")).decode("ascii")


def decode_token(token: str) -> tuple[str, int]:
    try:
        raw = base64.b64decode(token, validate=True).decode("utf-8")
        username, sep, ts = raw.rpartition(":")
        if not sep:
            raise ValueError("no separator")
        return username, int(ts)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise InvalidToken(str(e)) from e


def token_is_valid(username: str, issued_at: int, admin_username: str, now: int | None = None) -> bool:
    if now is None:
        now = now_ms()
    return secrets_equal(username, admin_username) and now - issued_at < SESSION_TTL_MS


def _reject(error: str) -> HTTPException:
    return HTTPException(status_code=401, detail={"success": False, "error": error})


async def require_admin(request: Request, authorization: str | None = Header(default=None)) -> str:
    """Зависимость для /admin/*: пропускает только живой токен админа."""
    scheme, _, token = (authorization or "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise _reject("Unauthorized")

    try:
        username, issued_at = decode_token(token)
    except InvalidToken:
        raise _reject("Invalid session token")

    settings = request.app.state.settings
    if not token_is_valid(username, issued_at, settings.admin_username):
        raise _reject("Invalid or expired session")
    return username
