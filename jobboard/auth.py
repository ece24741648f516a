from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from jobboard.errors import Unauthorized

_SALT = "jobboard-auth"


class TokenAuthority:
    def __init__(self, secret: str, max_age: int) -> None:
        self._serializer = URLSafeTimedSerializer(secret, salt=_SALT)
        self.max_age = max_age

    def issue(self, user_id: int) -> str:
        return self._serializer.dumps({"uid": user_id})

    def verify(self, token: str) -> int:
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            raise Unauthorized("Token expired")
        except BadSignature:
            raise Unauthorized("Token is not valid")
        uid = data.get("uid") if isinstance(data, dict) else None
        if not isinstance(uid, int):
            raise Unauthorized("Token is not valid")
        return uid


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def password_matches(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("No token, authorization denied")
    return token.strip()


def login_required(fn: Callable) -> Callable:
    """Resolve the caller from the bearer token into ``g.user_id`` or fail with 401."""

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        tokens: TokenAuthority = current_app.extensions["jobboard.tokens"]
        g.user_id = tokens.verify(_bearer_token())
        return fn(*args, **kwargs)

    return wrapper
