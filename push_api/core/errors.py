"""
Errores del gateway de push.
Cada ruta decide cómo se serializan (ver routes/push.py).
"""


class PushError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MethodNotAllowed(PushError):
    status_code = 405
    default_message = "Method not allowed"


class Unauthorized(PushError):
    status_code = 401
    default_message = "Bad app key"


class BadRequest(PushError):
    status_code = 400
    default_message = "Bad request"


class ServerMisconfigured(PushError):
    status_code = 500
    default_message = "Server misconfigured"


class CredentialAcquisitionFailed(PushError):
    status_code = 500
    default_message = "No se pudo obtener accessToken"


class DeliveryFailed(PushError):
    """Fallo de envío a UN token. No aborta el lote."""

    status_code = 502
    default_message = "FCM error"

    def __init__(self, message: str | None = None, token: str | None = None) -> None:
        self.token = token
        super().__init__(message)
