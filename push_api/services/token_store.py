"""
Resolución uid -> tokens FCM registrados.

El registro por usuario vive en Firestore (users/{uid}.fcmTokens, un mapa
token -> metadata). Aquí solo se lee; el alta/baja de tokens es de la app.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import firebase_admin
from anyio import to_thread
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "push-api"


class TokenStore(Protocol):
    async def get_tokens(self, uid: str) -> list[str]:
        ...


def get_firebase_app(info: Optional[dict[str, Any]] = None) -> firebase_admin.App:
    """
    App de firebase_admin dedicada. Con Service Account si lo hay,
    si no Application Default Credentials.
    """
    try:
        return firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        pass
    cred = credentials.Certificate(info) if info else credentials.ApplicationDefault()
    return firebase_admin.initialize_app(cred, name=FIREBASE_APP_NAME)


class FirestoreTokenStore:
    """
    El cliente de Firestore se crea en la primera lectura, no al construir,
    para que una request con tokens[] directos nunca toque Firebase.
    """

    def __init__(
        self,
        info: Optional[dict[str, Any]] = None,
        collection: str = "users",
        field: str = "fcmTokens",
        client: Any = None,
    ) -> None:
        self.info = info
        self.collection = collection
        self.field = field
        self._client = client

    def _col(self):
        if self._client is None:
            self._client = firestore.client(get_firebase_app(self.info))
        return self._client.collection(self.collection)

    async def get_tokens(self, uid: str) -> list[str]:
        """Tokens del usuario (claves del mapa). Sin documento o sin campo -> []."""

        def _read() -> list[str]:
            snap = self._col().document(uid).get()
            if not snap.exists:
                return []
            doc = snap.to_dict() or {}
            tokens = doc.get(self.field) or {}
            if not isinstance(tokens, dict):
                return []
            return [str(t) for t in tokens.keys() if t]

        tokens = await to_thread.run_sync(_read)
        logger.debug("uid=%s -> %d token(s)", uid, len(tokens))
        return tokens
