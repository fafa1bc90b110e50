"""
Backends de entrega FCM.

- FcmV1Backend: API HTTP v1 con Service Account (Bearer OAuth2, cacheado).
- FcmLegacyBackend: API legacy /fcm/send con server key estática.

Ambos exponen la misma capacidad: get_credential() + send(token, ...).
Un envío fallido levanta DeliveryFailed; el dispatcher decide qué hacer.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import timezone
from functools import partial
from typing import Any, Callable, Optional

import httpx
from anyio import to_thread
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GAuthRequest
from google.oauth2 import service_account

from ..core.errors import CredentialAcquisitionFailed, DeliveryFailed
from .credentials import DEFAULT_TTL_SECONDS, CredentialCache, credential_cache

logger = logging.getLogger(__name__)

FCM_SCOPES = ["https://www.googleapis.com/auth/firebase.messaging"]
FCM_V1_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"
FCM_LEGACY_URL = "https://fcm.googleapis.com/fcm/send"

# (token, expiry epoch o None)
TokenFetcher = Callable[[], tuple[Optional[str], Optional[float]]]


def fetch_access_token(info: dict[str, Any]) -> tuple[Optional[str], Optional[float]]:
    """
    Firma el JWT del Service Account y lo canjea por un access token.
    Es bloqueante (usa requests por debajo): llamar desde un hilo.
    """
    creds = service_account.Credentials.from_service_account_info(info, scopes=FCM_SCOPES)
    creds.refresh(GAuthRequest())
    expiry = None
    if creds.expiry is not None:
        # google-auth devuelve datetime naive en UTC
        expiry = creds.expiry.replace(tzinfo=timezone.utc).timestamp()
    return creds.token, expiry


def _stringify(data: Optional[dict[str, Any]]) -> dict[str, str]:
    # FCM v1 solo acepta mapas string -> string en `data`
    out: dict[str, str] = {}
    for k, v in (data or {}).items():
        out[str(k)] = v if isinstance(v, str) else json.dumps(v, ensure_ascii=False)
    return out


class DeliveryBackend(ABC):
    name: str = "base"

    def __init__(self, http: httpx.AsyncClient) -> None:
        self.http = http

    @abstractmethod
    async def get_credential(self) -> str:
        ...

    @abstractmethod
    async def send(self, token: str, title: str, body: str, data: Optional[dict[str, Any]] = None) -> dict:
        ...

    async def _post(self, token: str, url: str, headers: dict[str, str], payload: dict) -> httpx.Response:
        try:
            resp = await self.http.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise DeliveryFailed(f"FCM network error: {e!r}", token=token) from e
        if not resp.is_success:
            raise DeliveryFailed(f"FCM error: {resp.status_code} {resp.text}", token=token)
        return resp


class FcmV1Backend(DeliveryBackend):
    name = "fcm-v1"

    def __init__(
        self,
        info: dict[str, Any],
        http: httpx.AsyncClient,
        cache: CredentialCache = credential_cache,
        fetcher: Optional[TokenFetcher] = None,
        default_ttl: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        super().__init__(http)
        self.project_id: str = info["project_id"]
        self.url = FCM_V1_URL.format(project_id=self.project_id)
        self.cache = cache
        self.default_ttl = default_ttl
        self._fetch = fetcher or partial(fetch_access_token, info)

    async def get_credential(self) -> str:
        cached = self.cache.get()
        if cached:
            return cached

        # Sin lock: ver nota en services/credentials.py
        now = self.cache.clock()
        try:
            token, expiry = await to_thread.run_sync(self._fetch)
        except (GoogleAuthError, ValueError) as e:
            raise CredentialAcquisitionFailed(f"No se pudo obtener accessToken: {e}") from e
        if not token:
            raise CredentialAcquisitionFailed()

        exp = expiry or now + self.default_ttl
        self.cache.set(token, exp)
        logger.info("Access token FCM renovado (project=%s, exp=%d)", self.project_id, int(exp))
        return token

    async def send(self, token: str, title: str, body: str, data: Optional[dict[str, Any]] = None) -> dict:
        access_token = await self.get_credential()
        payload = {
            "message": {
                "token": token,
                "notification": {"title": title, "body": body},
                "data": _stringify(data),
            },
            "validate_only": False,
        }
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        resp = await self._post(token, self.url, headers, payload)
        try:
            return resp.json()
        except ValueError:
            return {}


class FcmLegacyBackend(DeliveryBackend):
    name = "fcm-legacy"

    def __init__(self, server_key: str, http: httpx.AsyncClient) -> None:
        super().__init__(http)
        self.server_key = server_key

    async def get_credential(self) -> str:
        if not self.server_key:
            raise CredentialAcquisitionFailed("Falta FCM_SERVER_KEY")
        return self.server_key

    async def send(self, token: str, title: str, body: str, data: Optional[dict[str, Any]] = None) -> dict:
        key = await self.get_credential()
        payload = {
            "to": token,
            "notification": {"title": title, "body": body},
            "data": data or {},
        }
        headers = {
            "Authorization": f"key={key}",
            "Content-Type": "application/json",
        }
        resp = await self._post(token, FCM_LEGACY_URL, headers, payload)
        try:
            out = resp.json()
        except ValueError:
            return {}

        # legacy responde 200 aunque el token sea inválido
        if isinstance(out, dict) and out.get("failure"):
            results = out.get("results")
            first = results[0] if isinstance(results, list) and results else {}
            reason = first.get("error", "unknown") if isinstance(first, dict) else "unknown"
            raise DeliveryFailed(f"FCM error: {reason}", token=token)
        return out
