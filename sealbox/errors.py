# --------------------------------------------------------------
# File: errors.py
# Description: Jerarquía de excepciones del contenedor cifrado.
# --------------------------------------------------------------
"""Errores tipados que `sealbox` propaga al llamante.

Ningún mensaje de error incluye material de clave, nonces ni texto en claro.
"""

__all__ = [
    "SealboxError",
    "InvalidKeyLength",
    "InvalidNonceLength",
    "AuthenticationFailed",
    "UnsupportedVersion",
    "MalformedContainer",
    "MessageTooLarge",
    "SerializationError",
    "DeserializationError",
    "EntropyUnavailable",
    "NonceExhausted",
]


class SealboxError(Exception):
    """Excepción base de todas las operaciones de `sealbox`."""


class InvalidKeyLength(SealboxError):
    """La clave no tiene la longitud exigida por el algoritmo."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Longitud de clave inválida: {actual} bytes (se esperaban {expected}).")
        self.expected = expected
        self.actual = actual


class InvalidNonceLength(SealboxError):
    """El nonce no tiene la longitud exigida por el algoritmo."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Longitud de nonce inválida: {actual} bytes (se esperaban {expected}).")
        self.expected = expected
        self.actual = actual


class AuthenticationFailed(SealboxError):
    """El tag no verifica: manipulación, corrupción o clave incorrecta."""


class UnsupportedVersion(SealboxError):
    """El byte de versión del contenedor no está soportado."""

    def __init__(self, version: int) -> None:
        super().__init__(f"Versión de contenedor no soportada: 0x{version:02x}")
        self.version = version


class MalformedContainer(SealboxError):
    """La entrada no puede interpretarse como contenedor."""


class MessageTooLarge(SealboxError):
    """El texto en claro supera el tamaño máximo del algoritmo."""


class SerializationError(SealboxError):
    """El codec no pudo convertir el valor a bytes."""


class DeserializationError(SealboxError):
    """El codec no pudo reconstruir el valor a partir de los bytes."""


class EntropyUnavailable(SealboxError):
    """La fuente de aleatoriedad segura del sistema no está disponible."""


class NonceExhausted(SealboxError):
    """El generador por contador agotó su espacio de nonces."""
