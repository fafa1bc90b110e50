"""
Dispatcher de push: resuelve tokens, asegura credencial y envía 1x1.

Los envíos van en secuencia: el token N+1 no sale hasta ver la respuesta
del token N. Un fallo por token se loguea y cuenta como no entregado; no
hay reintento dentro de la misma invocación.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import httpx

from ..core.errors import CredentialAcquisitionFailed, DeliveryFailed, ServerMisconfigured
from ..models.push import DispatchResult
from .fcm import DeliveryBackend
from .token_store import TokenStore

logger = logging.getLogger(__name__)


class PushDispatcher:
    def __init__(self, backend: DeliveryBackend, token_store: Optional[TokenStore] = None) -> None:
        self.backend = backend
        self.token_store = token_store

    async def resolve_tokens(
        self,
        tokens: Optional[Iterable[str]] = None,
        user_ids: Optional[Iterable[str]] = None,
    ) -> list[str]:
        """
        Tokens explícitos tal cual (orden y duplicados incluidos) + los de
        cada uid que no estén ya en la lista.
        """
        out = list(tokens or [])
        uids = [u for u in (user_ids or []) if u]
        if not uids:
            return out
        if self.token_store is None:
            raise ServerMisconfigured("No hay token store configurado para resolver userIds")

        seen = set(out)
        for uid in uids:
            for tk in await self.token_store.get_tokens(uid):
                if tk not in seen:
                    seen.add(tk)
                    out.append(tk)
        return out

    async def dispatch(
        self,
        tokens: list[str],
        title: str,
        body: str = "",
        data: Optional[dict[str, Any]] = None,
    ) -> DispatchResult:
        if not tokens:
            return DispatchResult(delivered=0, total=0)

        # credencial lista antes del primer envío; si falla, aborta todo
        await self.backend.get_credential()

        delivered = 0
        for tk in tokens:
            # un refresh de credencial que falla a mitad del lote cuenta solo para ese token
            try:
                await self.backend.send(tk, title, body, data)
                delivered += 1
            except (DeliveryFailed, CredentialAcquisitionFailed, httpx.HTTPError) as e:
                logger.error("Error enviando a token %s via %s: %s", tk, self.backend.name, e)

        logger.info("Push %s: %d/%d entregados", self.backend.name, delivered, len(tokens))
        return DispatchResult(delivered=delivered, total=len(tokens))
