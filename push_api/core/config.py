"""
Configuración central del gateway de push (fuente única de verdad).
Lee variables de entorno y expone un objeto Settings tipado.
"""
import json
import os
from typing import Any, Optional

from pydantic import BaseModel, Field

REQUIRED_SA_KEYS = ("project_id", "client_email", "private_key")


def _csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class Settings(BaseModel):
    APP_KEY: str = Field(default_factory=lambda: os.getenv("APP_KEY", "soc-metropoli-2025"))
    GOOGLE_APPLICATION_CREDENTIALS_JSON: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON", "")
    )
    FCM_SERVER_KEY: str = Field(default_factory=lambda: os.getenv("FCM_SERVER_KEY", ""))
    FCM_HTTP_TIMEOUT: float = Field(default_factory=lambda: float(os.getenv("FCM_HTTP_TIMEOUT", "10")))
    PUSH_DEFAULT_TITLE: str = Field(default_factory=lambda: os.getenv("PUSH_DEFAULT_TITLE", "SOC Metrópoli"))
    FIRESTORE_USERS_COLLECTION: str = Field(
        default_factory=lambda: os.getenv("FIRESTORE_USERS_COLLECTION", "users")
    )
    FIRESTORE_TOKENS_FIELD: str = Field(default_factory=lambda: os.getenv("FIRESTORE_TOKENS_FIELD", "fcmTokens"))
    CREDENTIAL_REFRESH_MARGIN: int = Field(
        default_factory=lambda: int(os.getenv("CREDENTIAL_REFRESH_MARGIN", "60"))
    )
    CREDENTIAL_DEFAULT_TTL: int = Field(default_factory=lambda: int(os.getenv("CREDENTIAL_DEFAULT_TTL", "3000")))
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: _csv(os.getenv("CORS_ORIGINS", "*")))

    def service_account(self) -> Optional[dict[str, Any]]:
        """
        JSON del Service Account ya parseado, o None si falta, no es JSON
        válido o le faltan project_id / client_email / private_key.
        """
        raw = self.GOOGLE_APPLICATION_CREDENTIALS_JSON.strip()
        if not raw:
            return None
        try:
            info = json.loads(raw)
        except ValueError:
            return None
        if not isinstance(info, dict) or not all(info.get(k) for k in REQUIRED_SA_KEYS):
            return None
        return info


settings = Settings()
