# --------------------------------------------------------------
# File: cipher.py
# Description: Motor AEAD (AES-GCM / ChaCha20-Poly1305) para el contenedor.
# --------------------------------------------------------------
"""Primitivas de cifrado autenticado sobre `cryptography`."""

from __future__ import annotations

import enum
import os
from typing import Optional, Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from sealbox.errors import (
    AuthenticationFailed,
    EntropyUnavailable,
    InvalidKeyLength,
    InvalidNonceLength,
    MessageTooLarge,
)

__all__ = [
    "Algorithm",
    "CipherEngine",
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "MAX_MESSAGE_SIZE",
    "generate_key",
]

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16

# Límite por llamada de la librería; muy por debajo del de ambos algoritmos.
MAX_MESSAGE_SIZE = 2**31 - 1


class Algorithm(str, enum.Enum):
    """Construcciones AEAD disponibles."""

    AES_256_GCM = "aes-256-gcm"
    CHACHA20_POLY1305 = "chacha20-poly1305"

    @property
    def key_size(self) -> int:
        return KEY_SIZE

    @property
    def nonce_size(self) -> int:
        return NONCE_SIZE

    @property
    def tag_size(self) -> int:
        return TAG_SIZE


_PRIMITIVES = {
    Algorithm.AES_256_GCM: AESGCM,
    Algorithm.CHACHA20_POLY1305: ChaCha20Poly1305,
}


def generate_key(algorithm: Algorithm = Algorithm.AES_256_GCM) -> bytes:
    """Genera una clave aleatoria con la longitud que exige el algoritmo.

    Args:
        algorithm (Algorithm): Algoritmo con el que se usará la clave.

    Returns:
        bytes: Clave simétrica nueva.

    """

    try:
        return os.urandom(Algorithm(algorithm).key_size)
    except (OSError, NotImplementedError) as exc:
        raise EntropyUnavailable("No se pudo obtener aleatoriedad segura del sistema.") from exc


class CipherEngine:
    """Cifrado y descifrado autenticado con un algoritmo fijo.

    El motor no guarda la clave: se recibe en cada llamada y se valida antes
    de tocar ninguna primitiva criptográfica.
    """

    def __init__(self, algorithm: Algorithm = Algorithm.AES_256_GCM) -> None:
        self.algorithm = Algorithm(algorithm)

    def __repr__(self) -> str:
        return f"CipherEngine({self.algorithm.value!r})"

    def check_key(self, key: bytes) -> None:
        """Lanza `InvalidKeyLength` si la clave no mide lo exigido."""

        if not isinstance(key, (bytes, bytearray, memoryview)):
            raise TypeError("La clave debe ser un objeto bytes.")
        if len(key) != self.algorithm.key_size:
            raise InvalidKeyLength(self.algorithm.key_size, len(key))

    def check_nonce(self, nonce: bytes) -> None:
        """Lanza `InvalidNonceLength` si el nonce no mide lo exigido."""

        if len(nonce) != self.algorithm.nonce_size:
            raise InvalidNonceLength(self.algorithm.nonce_size, len(nonce))

    def encrypt(
        self,
        key: bytes,
        nonce: bytes,
        plaintext: bytes,
        associated_data: Optional[bytes] = None,
    ) -> Tuple[bytes, bytes]:
        """Cifra y autentica `plaintext`.

        Args:
            key (bytes): Clave de 256 bits.
            nonce (bytes): Nonce de 96 bits, único por clave.
            plaintext (bytes): Datos en claro.
            associated_data (Optional[bytes]): Datos autenticados adicionales.

        Returns:
            Tuple[bytes, bytes]: Ciphertext (misma longitud que el claro) y tag.

        """

        self.check_key(key)
        self.check_nonce(nonce)
        if len(plaintext) > MAX_MESSAGE_SIZE:
            raise MessageTooLarge(
                f"Mensaje de {len(plaintext)} bytes; máximo {MAX_MESSAGE_SIZE}."
            )

        aead = _PRIMITIVES[self.algorithm](bytes(key))
        ct_full = aead.encrypt(nonce, plaintext, associated_data)
        return ct_full[: -self.algorithm.tag_size], ct_full[-self.algorithm.tag_size :]

    def decrypt(
        self,
        key: bytes,
        nonce: bytes,
        ciphertext: bytes,
        tag: bytes,
        associated_data: Optional[bytes] = None,
    ) -> bytes:
        """Verifica el tag y, solo si es válido, descifra.

        Args:
            key (bytes): Clave de 256 bits.
            nonce (bytes): Nonce usado al cifrar.
            ciphertext (bytes): Datos cifrados sin etiqueta.
            tag (bytes): Etiqueta de autenticación de 128 bits.
            associated_data (Optional[bytes]): Datos autenticados adicionales.

        Returns:
            bytes: Texto en claro original.

        Raises:
            AuthenticationFailed: Si la verificación falla; no se devuelve
            ningún byte parcial.

        """

        self.check_key(key)
        self.check_nonce(nonce)
        if len(tag) != self.algorithm.tag_size:
            raise AuthenticationFailed("Tag de autenticación con longitud incorrecta.")

        aead = _PRIMITIVES[self.algorithm](bytes(key))
        try:
            return aead.decrypt(nonce, bytes(ciphertext) + bytes(tag), associated_data)
        except InvalidTag as exc:
            raise AuthenticationFailed("No se ha podido verificar el contenedor.") from exc
