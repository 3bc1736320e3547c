"""
Configuración centralizada de la librería usando pydantic-settings.

Las variables de entorno llevan el prefijo ``CRUD_`` (por ejemplo
``CRUD_DATABASE_URL``) y también pueden leerse de un archivo ``.env``.
"""
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Configuración cargada desde variables de entorno."""

    # Database
    database_url: str = Field(
        default="sqlite:///./crud.db",
        description="URL de conexión a la base de datos"
    )
    debug_mode: bool = Field(
        default=False,
        description="Emite el SQL generado (solo para desarrollo)"
    )
    autocommit: bool = Field(
        default=True,
        description="Hace commit tras cada escritura; si es False solo hace flush"
    )

    # Paginación
    default_page_size: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Tamaño de página por defecto para listados"
    )
    max_page_size: int = Field(
        default=500,
        ge=1,
        le=500,
        description="Tamaño máximo de página permitido"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_prefix="CRUD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Valida que el nivel de logging sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(
                f"Nivel de log '{v}' no válido. Usando 'INFO'. "
                f"Niveles válidos: {valid_levels}"
            )
            return "INFO"
        return v_upper


# Instancia global de configuración
settings = Settings()


def configure_logging():
    """Configura el sistema de logging."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=log_format,
        handlers=[
            logging.StreamHandler(),
        ]
    )

    # Reducir verbosidad de librerías externas
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger.info(f"Logging configurado en nivel {settings.log_level}")


def get_settings() -> Settings:
    """Retorna la instancia de configuración."""
    return settings
