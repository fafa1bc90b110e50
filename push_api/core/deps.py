"""
Dependencias comunes para FastAPI:
- http_client (httpx.AsyncClient compartido, creado en lifespan)
- v1_backend / legacy_backend (None si falta configuración)
- token_store (Firestore)
- check_app_key (header x-app-key)

Los backends se devuelven como Optional: la ruta valida método y app key
antes de quejarse de configuración.
"""
import secrets
from typing import Optional

import httpx
from fastapi import Depends, Request

from ..core.config import settings
from ..core.errors import Unauthorized
from ..services.fcm import FcmLegacyBackend, FcmV1Backend
from ..services.token_store import FirestoreTokenStore, TokenStore

APP_KEY_HEADER = "x-app-key"


def http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http


def v1_backend(http: httpx.AsyncClient = Depends(http_client)) -> Optional[FcmV1Backend]:
    info = settings.service_account()
    if info is None:
        return None
    return FcmV1Backend(info, http, default_ttl=settings.CREDENTIAL_DEFAULT_TTL)


def legacy_backend(http: httpx.AsyncClient = Depends(http_client)) -> Optional[FcmLegacyBackend]:
    if not settings.FCM_SERVER_KEY:
        return None
    return FcmLegacyBackend(settings.FCM_SERVER_KEY, http)


def token_store() -> Optional[TokenStore]:
    return FirestoreTokenStore(
        settings.service_account(),
        collection=settings.FIRESTORE_USERS_COLLECTION,
        field=settings.FIRESTORE_TOKENS_FIELD,
    )


def check_app_key(request: Request) -> None:
    provided = request.headers.get(APP_KEY_HEADER) or ""
    if not secrets.compare_digest(provided.encode(), settings.APP_KEY.encode()):
        raise Unauthorized()
