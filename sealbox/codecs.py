# --------------------------------------------------------------
# File: codecs.py
# Description: Adaptadores de serialización intercambiables.
# --------------------------------------------------------------
"""Codecs que convierten valores de Python en bytes y viceversa.

El contenedor no asume ningún formato: cualquier objeto con `encode` y
`decode` sirve. Los fallos se traducen a `SerializationError` o
`DeserializationError` conservando la causa original.
"""

from __future__ import annotations

import json
from typing import Any, Generic, Protocol, Type, TypeVar

from pydantic import BaseModel, ValidationError

from sealbox.errors import DeserializationError, SerializationError

__all__ = ["Codec", "BytesCodec", "Utf8Codec", "JsonCodec", "PydanticCodec"]

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class Codec(Protocol[T]):
    """Contrato mínimo de un adaptador de serialización."""

    def encode(self, value: T) -> bytes:
        ...

    def decode(self, data: bytes) -> T:
        ...


class BytesCodec:
    """Codec identidad para valores que ya son bytes."""

    def encode(self, value: bytes) -> bytes:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise SerializationError(f"BytesCodec no acepta {type(value).__name__}.")
        return bytes(value)

    def decode(self, data: bytes) -> bytes:
        return bytes(data)


class Utf8Codec:
    """Cadenas de texto codificadas en UTF-8."""

    def encode(self, value: str) -> bytes:
        if not isinstance(value, str):
            raise SerializationError(f"Utf8Codec no acepta {type(value).__name__}.")
        return value.encode("utf-8")

    def decode(self, data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DeserializationError("Los bytes recuperados no son UTF-8 válido.") from exc


def _check_json_native(value: Any) -> None:
    """Rechaza valores que `json` aceptaría pero no devolvería idénticos."""

    if isinstance(value, dict):
        for item_key, item in value.items():
            if not isinstance(item_key, str):
                raise SerializationError(
                    f"Clave JSON no textual: {type(item_key).__name__}."
                )
            _check_json_native(item)
    elif isinstance(value, list):
        for item in value:
            _check_json_native(item)
    elif isinstance(value, tuple):
        raise SerializationError("Las tuplas volverían como listas; usa una lista.")


class JsonCodec:
    """Valores nativos de JSON, serializados de forma compacta.

    Solo se aceptan `dict` con claves `str`, `list`, `str`, `int`, `float`
    finitos, `bool` y `None`: cualquier otra cosa no sobreviviría intacta al
    viaje de ida y vuelta y se rechaza con `SerializationError`.
    """

    def __init__(self, *, sort_keys: bool = True) -> None:
        self.sort_keys = sort_keys

    def encode(self, value: Any) -> bytes:
        _check_json_native(value)
        try:
            text = json.dumps(
                value,
                separators=(",", ":"),
                sort_keys=self.sort_keys,
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as exc:
            raise SerializationError("El valor no es serializable a JSON.") from exc
        return text.encode("utf-8")

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DeserializationError("Los bytes recuperados no son JSON válido.") from exc


class PydanticCodec(Generic[M]):
    """Modelos Pydantic serializados mediante su representación JSON.

    Args:
        model (Type[M]): Clase del modelo que se espera al decodificar.

    """

    def __init__(self, model: Type[M]) -> None:
        self.model = model

    def encode(self, value: M) -> bytes:
        if not isinstance(value, self.model):
            raise SerializationError(
                f"Se esperaba {self.model.__name__}, se recibió {type(value).__name__}."
            )
        return value.model_dump_json().encode("utf-8")

    def decode(self, data: bytes) -> M:
        try:
            return self.model.model_validate_json(data)
        except ValidationError as exc:
            raise DeserializationError(
                f"Los bytes recuperados no encajan con {self.model.__name__}."
            ) from exc
