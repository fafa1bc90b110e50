# push_api/routes/push.py
"""
Endpoints de envío de push.

- POST /api/push         -> FCM HTTP v1 (Service Account). tokens[] y/o userIds[].
- POST /api/push/legacy  -> FCM legacy (server key). uid -> fcmTokens en Firestore.

Ambas rutas aceptan cualquier método para poder responder 405 con el
formato de cada variante; el orden de validación es método, app key,
configuración y body.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..core.config import settings
from ..core.deps import check_app_key, legacy_backend, token_store, v1_backend
from ..core.errors import BadRequest, MethodNotAllowed, PushError, ServerMisconfigured
from ..models.push import DispatchRequest, LegacyDispatchRequest
from ..services.dispatcher import PushDispatcher
from ..services.fcm import FcmLegacyBackend, FcmV1Backend
from ..services.token_store import TokenStore

router = APIRouter()
logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
NO_TARGETS = "Debes enviar tokens[] o userIds[]"


async def _read_json(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = await request.json()
    except ValueError:
        raise BadRequest("Body JSON inválido")
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise BadRequest("El body debe ser un objeto JSON")
    return payload


# ---------------- Variante v1 ----------------
@router.api_route("/push", methods=ALL_METHODS, summary="Enviar push vía FCM HTTP v1")
async def push_v1(
    request: Request,
    backend: Optional[FcmV1Backend] = Depends(v1_backend),
    store: Optional[TokenStore] = Depends(token_store),
):
    """
    Respuesta: {ok, projectId, delivered, total}. Un token que falla solo
    baja `delivered`.
    """
    try:
        if request.method != "POST":
            raise MethodNotAllowed()
        check_app_key(request)
        if backend is None:
            raise ServerMisconfigured("ServiceAccount sin project_id")

        try:
            req = DispatchRequest.model_validate(await _read_json(request))
        except ValidationError:
            raise BadRequest(NO_TARGETS)
        if not req.has_targets():
            raise BadRequest(NO_TARGETS)

        dispatcher = PushDispatcher(backend, store)
        tokens = await dispatcher.resolve_tokens(req.tokens, req.user_ids)
        result = await dispatcher.dispatch(
            tokens,
            req.title or settings.PUSH_DEFAULT_TITLE,
            req.body or "",
            req.data or {},
        )
        return {"ok": True, "projectId": backend.project_id, **result.model_dump()}
    except PushError as e:
        return JSONResponse({"ok": False, "error": e.message}, status_code=e.status_code)
    except Exception as e:
        logger.exception("Error inesperado en /api/push")
        return JSONResponse({"ok": False, "error": str(e) or "Internal error"}, status_code=500)


# ---------------- Variante legacy ----------------
def _legacy_error(e: PushError) -> Response:
    if isinstance(e, MethodNotAllowed):
        return Response(status_code=e.status_code)
    if e.status_code >= 500:
        return JSONResponse({"ok": False}, status_code=e.status_code)
    return JSONResponse({"ok": False, "msg": e.message}, status_code=e.status_code)


@router.api_route("/push/legacy", methods=ALL_METHODS, summary="Enviar push a un usuario (FCM legacy)")
async def push_legacy(
    request: Request,
    backend: Optional[FcmLegacyBackend] = Depends(legacy_backend),
    store: Optional[TokenStore] = Depends(token_store),
):
    """
    Busca los fcmTokens del uid y envía a cada uno.
    Usuario sin tokens -> {ok: true, delivered: 0, total: 0}.
    """
    try:
        if request.method != "POST":
            raise MethodNotAllowed()
        check_app_key(request)
        if backend is None:
            raise ServerMisconfigured("Falta FCM_SERVER_KEY")

        try:
            req = LegacyDispatchRequest.model_validate(await _read_json(request))
        except ValidationError:
            raise BadRequest("uid y title son obligatorios")

        dispatcher = PushDispatcher(backend, store)
        tokens = await dispatcher.resolve_tokens(user_ids=[req.uid])
        result = await dispatcher.dispatch(tokens, req.title, req.body, {})
        return {"ok": True, **result.model_dump()}
    except PushError as e:
        return _legacy_error(e)
    except Exception:
        logger.exception("Error inesperado en /api/push/legacy")
        return JSONResponse({"ok": False}, status_code=500)
