# --------------------------------------------------------------
# File: config.py
# Description: Configuración por entorno (.env) de los valores por defecto.
# --------------------------------------------------------------
"""Carga de ajustes desde variables de entorno.

Solo `Sealer.from_settings` consume estos ajustes; el cifrado, el formato
del contenedor y los generadores de nonces nunca leen el entorno.
"""

from __future__ import annotations

import logging
import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator, model_validator

from sealbox.cipher import Algorithm

__all__ = ["SealboxSettings", "load_settings", "configure_logging"]


class SealboxSettings(BaseModel):
    """Ajustes por defecto para construir un `Sealer`.

    Attributes:
        algorithm (Algorithm): AEAD con el que se sella.
        nonce_strategy (str): `random` (por defecto) o `counter`.
        counter_path (Optional[str]): Fichero de estado del modo contador.
        log_level (str): Nivel del logger del paquete.

    """

    algorithm: Algorithm = Algorithm.AES_256_GCM
    nonce_strategy: Literal["random", "counter"] = "random"
    counter_path: Optional[str] = None
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Nivel de log desconocido: {value}")
        return level

    @model_validator(mode="after")
    def _counter_needs_state(self) -> "SealboxSettings":
        if self.nonce_strategy == "counter" and not self.counter_path:
            raise ValueError("SEALBOX_NONCE_STRATEGY=counter exige SEALBOX_COUNTER_PATH.")
        return self


def load_settings(dotenv_path: Optional[str] = None) -> SealboxSettings:
    """Lee `.env` (si existe) y el entorno y devuelve ajustes validados.

    Args:
        dotenv_path (Optional[str]): Ruta alternativa del fichero `.env`.

    Returns:
        SealboxSettings: Ajustes con los valores por defecto aplicados. El
        nivel de log leído se aplica al logger del paquete.

    """

    load_dotenv(dotenv_path)
    settings = SealboxSettings(
        algorithm=os.getenv("SEALBOX_ALGORITHM", Algorithm.AES_256_GCM.value).lower(),
        nonce_strategy=os.getenv("SEALBOX_NONCE_STRATEGY", "random").lower(),
        counter_path=os.getenv("SEALBOX_COUNTER_PATH") or None,
        log_level=os.getenv("SEALBOX_LOG_LEVEL", "WARNING"),
    )
    configure_logging(settings.log_level)
    return settings


def configure_logging(level: str = "WARNING") -> None:
    """Ajusta el nivel del logger raíz del paquete `sealbox`."""

    logging.getLogger("sealbox").setLevel(level.upper())
