# --------------------------------------------------------------
# File: container.py
# Description: Formato binario versionado del contenedor cifrado.
# --------------------------------------------------------------
"""Disposición binaria y versionado del contenedor.

Layout::

    [version: 1][nonce: 12][tag: 16][ciphertext: resto]

Los 7 bits bajos de `version` identifican el formato (y con él el
algoritmo AEAD); el bit alto marca que al sellar se vincularon datos
asociados. El byte completo se autentica siempre como parte de la AAD.
"""

from __future__ import annotations

import base64
import binascii
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from sealbox.cipher import NONCE_SIZE, TAG_SIZE, Algorithm
from sealbox.errors import MalformedContainer, UnsupportedVersion

__all__ = [
    "EncryptedContainer",
    "FORMAT_VERSIONS",
    "AAD_FLAG",
    "MIN_CONTAINER_SIZE",
    "version_for",
]

AAD_FLAG = 0x80
_FORMAT_MASK = 0x7F

FORMAT_VERSIONS = {
    0x01: Algorithm.AES_256_GCM,
    0x02: Algorithm.CHACHA20_POLY1305,
}
_VERSION_BY_ALGORITHM = {alg: version for version, alg in FORMAT_VERSIONS.items()}

MIN_CONTAINER_SIZE = 1 + NONCE_SIZE + TAG_SIZE


def version_for(algorithm: Algorithm, has_associated_data: bool = False) -> int:
    """Calcula el byte de versión para un algoritmo y la marca de AAD."""

    version = _VERSION_BY_ALGORITHM[Algorithm(algorithm)]
    return version | AAD_FLAG if has_associated_data else version


def _algorithm_of(version: int) -> Algorithm:
    try:
        return FORMAT_VERSIONS[version & _FORMAT_MASK]
    except KeyError:
        raise UnsupportedVersion(version) from None


class EncryptedContainer(BaseModel):
    """Contenedor inmutable producido por `Sealer.seal` o cargado de bytes.

    Attributes:
        version (int): Byte de versión (formato + marca de AAD).
        nonce (bytes): Nonce usado al cifrar; no es secreto.
        tag (bytes): Etiqueta de autenticación.
        ciphertext (bytes): Datos cifrados sin etiqueta.

    """

    model_config = ConfigDict(frozen=True, strict=True)

    version: int
    nonce: bytes
    tag: bytes
    ciphertext: bytes

    def __init__(self, **data) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise MalformedContainer("Campos del contenedor con tipo inválido.") from exc

    @model_validator(mode="after")
    def _check_layout(self) -> "EncryptedContainer":
        if not 0 <= self.version <= 0xFF:
            raise MalformedContainer("El byte de versión no cabe en un byte.")
        algorithm = _algorithm_of(self.version)
        if len(self.nonce) != algorithm.nonce_size:
            raise MalformedContainer("Nonce con longitud incorrecta.")
        if len(self.tag) != algorithm.tag_size:
            raise MalformedContainer("Tag con longitud incorrecta.")
        return self

    def __repr__(self) -> str:
        return (
            f"EncryptedContainer(version=0x{self.version:02x}, "
            f"algorithm={self.algorithm.value!r}, ciphertext_len={len(self.ciphertext)})"
        )

    @property
    def algorithm(self) -> Algorithm:
        return _algorithm_of(self.version)

    @property
    def format_version(self) -> int:
        return self.version & _FORMAT_MASK

    @property
    def has_associated_data(self) -> bool:
        return bool(self.version & AAD_FLAG)

    @property
    def header(self) -> bytes:
        return bytes([self.version])

    def bound_data(self, associated_data: Optional[bytes] = None) -> bytes:
        """AAD efectiva: cabecera seguida de los datos asociados del llamante."""

        return self.header + (associated_data or b"")

    def to_bytes(self) -> bytes:
        """Serializa el contenedor con el layout estable."""

        return self.header + self.nonce + self.tag + self.ciphertext

    def to_text(self) -> str:
        """Codifica el contenedor en Base64 URL-safe sin relleno."""

        return base64.urlsafe_b64encode(self.to_bytes()).decode("ascii").rstrip("=")

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedContainer":
        """Interpreta bytes producidos previamente por `to_bytes`.

        Args:
            data (bytes): Contenedor serializado.

        Returns:
            EncryptedContainer: Contenedor listo para abrir.

        Raises:
            MalformedContainer: Si la entrada no es binaria o es demasiado corta.
            UnsupportedVersion: Si el byte de versión no se reconoce.

        """

        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise MalformedContainer("El contenedor debe ser un objeto bytes.")
        data = bytes(data)
        if len(data) < MIN_CONTAINER_SIZE:
            raise MalformedContainer(
                f"Contenedor demasiado corto: {len(data)} bytes (mínimo {MIN_CONTAINER_SIZE})."
            )

        version = data[0]
        algorithm = _algorithm_of(version)
        nonce_end = 1 + algorithm.nonce_size
        tag_end = nonce_end + algorithm.tag_size
        return cls(
            version=version,
            nonce=data[1:nonce_end],
            tag=data[nonce_end:tag_end],
            ciphertext=data[tag_end:],
        )

    @classmethod
    def from_text(cls, value: str) -> "EncryptedContainer":
        """Inversa de `to_text`; tolera la ausencia de relleno."""

        if not isinstance(value, str):
            raise MalformedContainer("La representación textual debe ser str.")
        try:
            raw = base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
        except (binascii.Error, ValueError) as exc:
            raise MalformedContainer("Representación Base64 inválida.") from exc
        return cls.from_bytes(raw)
