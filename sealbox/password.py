# --------------------------------------------------------------
# File: password.py
# Description: Contenedor protegido por passphrase (salt + parámetros Argon2id).
# --------------------------------------------------------------
"""Sellado con passphrase en lugar de clave.

El núcleo nunca deriva claves. Este módulo es un colaborador opcional que
envuelve un `EncryptedContainer` con la salt y los costes Argon2id usados,
de forma que la passphrase basta para abrirlo más tarde::

    [t: 1][m_kib: 4 BE][p: 1][salt: 16][contenedor interno]

La cabecera completa viaja como datos asociados del contenedor interno:
alterar salt o costes se detecta como `AuthenticationFailed`.
"""

from __future__ import annotations

import os
import struct
from typing import Generic, Optional, TypeVar, Union

from argon2.low_level import Type, hash_secret_raw
from pydantic import BaseModel, ConfigDict, field_validator

from sealbox.cipher import KEY_SIZE, Algorithm
from sealbox.codecs import Codec
from sealbox.container import EncryptedContainer
from sealbox.errors import MalformedContainer
from sealbox.nonce import NonceGenerator
from sealbox.sealer import Sealer

__all__ = ["KdfParams", "PasswordContainer", "PasswordSealer"]

T = TypeVar("T")

SALT_SIZE = 16
_PARAMS_FORMAT = ">BIB"
_PARAMS_SIZE = struct.calcsize(_PARAMS_FORMAT)
HEADER_SIZE = _PARAMS_SIZE + SALT_SIZE

# Cotas al leer contenedores ajenos: evitan derivaciones desproporcionadas.
_MAX_TIME_COST = 16
_MAX_MEMORY_KIB = 1024 * 1024


def _header(params: "KdfParams", salt: bytes) -> bytes:
    return struct.pack(_PARAMS_FORMAT, params.t, params.m, params.p) + salt


class KdfParams(BaseModel):
    """Costes Argon2id guardados junto a la salt.

    Attributes:
        t (int): Iteraciones.
        m (int): Memoria en KiB.
        p (int): Paralelismo.

    """

    model_config = ConfigDict(frozen=True)

    t: int = 3
    m: int = 64 * 1024
    p: int = 1

    def check_bounds(self) -> None:
        if not 1 <= self.t <= _MAX_TIME_COST:
            raise MalformedContainer("Coste temporal Argon2id fuera de rango.")
        if not 1 <= self.p <= 0xFF or not 8 * self.p <= self.m <= _MAX_MEMORY_KIB:
            raise MalformedContainer("Memoria o paralelismo Argon2id fuera de rango.")

    def derive(self, passphrase: str, salt: bytes) -> bytes:
        """Deriva la clave de 256 bits del contenedor interno."""

        return hash_secret_raw(
            passphrase.encode("utf-8"),
            salt,
            time_cost=self.t,
            memory_cost=self.m,
            parallelism=self.p,
            hash_len=KEY_SIZE,
            type=Type.ID,
        )


class PasswordContainer(BaseModel):
    """Contenedor interno más la salt y los costes necesarios para abrirlo."""

    model_config = ConfigDict(frozen=True, strict=True)

    params: KdfParams
    salt: bytes
    inner: EncryptedContainer

    @field_validator("salt")
    @classmethod
    def _salt_size(cls, value: bytes) -> bytes:
        if len(value) != SALT_SIZE:
            raise ValueError(f"la salt debe tener {SALT_SIZE} bytes")
        return value

    @property
    def header(self) -> bytes:
        return _header(self.params, self.salt)

    def to_bytes(self) -> bytes:
        return self.header + self.inner.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> "PasswordContainer":
        """Interpreta bytes producidos por `to_bytes`.

        Raises:
            MalformedContainer: Entrada corta o costes fuera de rango.
            UnsupportedVersion: Versión desconocida del contenedor interno.

        """

        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise MalformedContainer("El contenedor debe ser un objeto bytes.")
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise MalformedContainer(
                f"Contenedor con passphrase demasiado corto: {len(data)} bytes."
            )
        t, m, p = struct.unpack(_PARAMS_FORMAT, data[:_PARAMS_SIZE])
        params = KdfParams(t=t, m=m, p=p)
        params.check_bounds()
        return cls(
            params=params,
            salt=data[_PARAMS_SIZE:HEADER_SIZE],
            inner=EncryptedContainer.from_bytes(data[HEADER_SIZE:]),
        )


class PasswordSealer(Generic[T]):
    """Sella valores bajo una passphrase con salt nueva en cada llamada.

    Args:
        codec (Codec[T]): Adaptador de serialización.
        params (Optional[KdfParams]): Costes Argon2id para contenedores nuevos.
        algorithm (Algorithm): AEAD del contenedor interno.
        nonce_generator (Optional[NonceGenerator]): Fuente de nonces.

    """

    def __init__(
        self,
        codec: Codec[T],
        params: Optional[KdfParams] = None,
        algorithm: Algorithm = Algorithm.AES_256_GCM,
        nonce_generator: Optional[NonceGenerator] = None,
    ) -> None:
        self.params = params or KdfParams()
        self.params.check_bounds()
        self.sealer = Sealer(codec, algorithm=algorithm, nonce_generator=nonce_generator)

    def seal(self, value: T, passphrase: str) -> PasswordContainer:
        salt = os.urandom(SALT_SIZE)
        key = self.params.derive(passphrase, salt)
        inner = self.sealer.seal(value, key, associated_data=_header(self.params, salt))
        return PasswordContainer(params=self.params, salt=salt, inner=inner)

    def open(
        self,
        container: Union[PasswordContainer, bytes, bytearray, memoryview],
        passphrase: str,
    ) -> T:
        """Deriva la clave con la salt almacenada y abre el contenedor interno.

        Raises:
            AuthenticationFailed: Passphrase incorrecta o cabecera alterada.

        """

        if not isinstance(container, PasswordContainer):
            container = PasswordContainer.from_bytes(container)
        container.params.check_bounds()
        key = container.params.derive(passphrase, container.salt)
        return self.sealer.open(container.inner, key, associated_data=container.header)
