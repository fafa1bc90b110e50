"""
Cache de la credencial de entrega (access token OAuth2 o server key).

Vive en memoria del proceso y se reemplaza in situ al caducar.
No hay lock: si dos requests concurrentes ven el cache vencido, ambas piden
un token nuevo y la última en terminar gana. Es idempotente, solo gasta una
llamada de más al emisor, y así se queda.
"""
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.config import settings

REFRESH_MARGIN_SECONDS = 60
DEFAULT_TTL_SECONDS = 3000


@dataclass(frozen=True)
class CachedCredential:
    token: str
    expires_at: float  # epoch en segundos


class CredentialCache:
    def __init__(
        self,
        margin: int = REFRESH_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.margin = margin
        self.clock = clock
        self._current: Optional[CachedCredential] = None

    def get(self) -> Optional[str]:
        """Token vigente, o None si no hay o vence en menos de `margin` segundos."""
        if not self.is_fresh(self.clock()):
            return None
        return self._current.token

    def is_fresh(self, now: float) -> bool:
        cur = self._current
        return cur is not None and cur.expires_at - self.margin > now

    def set(self, value: str, expiry: float) -> CachedCredential:
        self._current = CachedCredential(token=value, expires_at=float(expiry))
        return self._current

    @property
    def current(self) -> Optional[CachedCredential]:
        return self._current


# Cache compartido por todas las requests del proceso
credential_cache = CredentialCache(margin=settings.CREDENTIAL_REFRESH_MARGIN)
