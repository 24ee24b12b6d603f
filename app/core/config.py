"""Configuración central de la aplicación (Pydantic Settings).

- Carga variables desde .env en la raíz del backend.
- Agrupa ajustes por área: App, CORS, Mongo, Auth/JWT, Notas/QR.
"""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

# Resuelve el .env ubicado en la raíz del backend (independiente del CWD)
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """Conjunto de variables de configuración con valores por defecto razonables.

    Nota: los valores pueden sobreescribirse vía variables de entorno (.env).
    """
    # App
    app_name: str = "Notes API"
    api_prefix: str = "/api"
    log_level: str = Field(
        "INFO",
        validation_alias=AliasChoices("NOTES_LOG_LEVEL", "LOG_LEVEL"),
    )

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    cors_allow_any: bool = False  # Permite todos los orígenes (usa con cuidado)

    # Mongo
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "notes_db"
    mongo_tls: bool = False
    # TLS relax options (dev only)
    mongo_tls_insecure: bool = False  # allows invalid certs
    mongo_tls_allow_invalid_hostnames: bool = False
    mongo_server_selection_timeout_ms: int = 15000

    # Auth / JWT
    jwt_secret: str = "dev-only-secret-change-me-0123456789abcdef"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    note_access_expire_minutes: int = 15

    # Perfil: copia redundante del password de login en `users` (compatibilidad)
    store_profile_password: bool = True

    # QR
    qr_box_size: int = 10
    qr_border: int = 4

    # --- Utilidades derivadas / helpers ---
    @property
    def api_prefix_normalized(self) -> str:
        """Devuelve `api_prefix` con formato consistente.

        - Siempre inicia con '/'
        - Sin '/' final (excepto cuando es solo '/')
        - Si está vacío, devuelve ""
        """
        pref = (self.api_prefix or "").strip()
        if not pref:
            return ""
        if not pref.startswith('/'):
            pref = '/' + pref
        if len(pref) > 1 and pref.endswith('/'):
            pref = pref[:-1]
        return pref

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # no fallar si hay variables no usadas
    )


settings = Settings()
