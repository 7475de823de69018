# --------------------------------------------------------------
# File: sealer.py
# Description: Sellado y apertura de valores tipados en contenedores cifrados.
# --------------------------------------------------------------
"""Orquestación codec -> AEAD -> contenedor y su camino inverso."""

from __future__ import annotations

import logging
from typing import Generic, Optional, TypeVar, Union

from sealbox.cipher import Algorithm, CipherEngine
from sealbox.codecs import BytesCodec, Codec
from sealbox.config import SealboxSettings, configure_logging, load_settings
from sealbox.container import FORMAT_VERSIONS, EncryptedContainer, version_for
from sealbox.errors import (
    AuthenticationFailed,
    DeserializationError,
    SealboxError,
    SerializationError,
)
from sealbox.models import OpenOutcome
from sealbox.nonce import CounterNonceGenerator, NonceGenerator, RandomNonceGenerator

__all__ = ["Sealer", "seal", "open_container"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

ContainerInput = Union[EncryptedContainer, bytes, bytearray, memoryview]

# Un motor por algoritmo soportado; no guardan estado.
_ENGINES = {alg: CipherEngine(alg) for alg in FORMAT_VERSIONS.values()}


class Sealer(Generic[T]):
    """Sella valores de tipo `T` bajo una clave simétrica.

    Args:
        codec (Codec[T]): Adaptador que convierte `T` en bytes y viceversa.
        algorithm (Algorithm): AEAD usado al sellar. Al abrir se respeta el
            algoritmo que indique la versión del contenedor.
        nonce_generator (Optional[NonceGenerator]): Fuente de nonces; por
            defecto `RandomNonceGenerator`.

    """

    def __init__(
        self,
        codec: Codec[T],
        algorithm: Algorithm = Algorithm.AES_256_GCM,
        nonce_generator: Optional[NonceGenerator] = None,
    ) -> None:
        self.codec = codec
        self.algorithm = Algorithm(algorithm)
        self.engine = _ENGINES[self.algorithm]
        self.nonces = nonce_generator or RandomNonceGenerator(self.algorithm.nonce_size)
        if self.nonces.size != self.algorithm.nonce_size:
            raise ValueError(
                f"El generador produce nonces de {self.nonces.size} bytes; "
                f"{self.algorithm.value} exige {self.algorithm.nonce_size}."
            )

    @classmethod
    def from_settings(
        cls, codec: Codec[T], settings: Optional[SealboxSettings] = None
    ) -> "Sealer[T]":
        """Construye un `Sealer` a partir de la configuración del entorno.

        También aplica `log_level` al logger del paquete.
        """

        settings = settings or load_settings()
        configure_logging(settings.log_level)
        if settings.nonce_strategy == "counter":
            nonces: NonceGenerator = CounterNonceGenerator(
                settings.counter_path, size=settings.algorithm.nonce_size
            )
        else:
            nonces = RandomNonceGenerator(settings.algorithm.nonce_size)
        return cls(codec, algorithm=settings.algorithm, nonce_generator=nonces)

    def seal(
        self, value: T, key: bytes, associated_data: Optional[bytes] = None
    ) -> EncryptedContainer:
        """Serializa y cifra `value` en un contenedor nuevo.

        Args:
            value (T): Valor a proteger.
            key (bytes): Clave simétrica de la longitud exigida.
            associated_data (Optional[bytes]): Contexto autenticado, no cifrado.
                Debe volver a proporcionarse, idéntico, al abrir.

        Returns:
            EncryptedContainer: Contenedor con nonce fresco.

        """

        self.engine.check_key(key)
        try:
            plaintext = self.codec.encode(value)
        except SealboxError:
            raise
        except Exception as exc:
            raise SerializationError("El codec no pudo serializar el valor.") from exc

        version = version_for(self.algorithm, associated_data is not None)
        nonce = self.nonces.next()
        ciphertext, tag = self.engine.encrypt(
            key, nonce, plaintext, bytes([version]) + (associated_data or b"")
        )
        del plaintext

        container = EncryptedContainer(version=version, nonce=nonce, tag=tag, ciphertext=ciphertext)
        logger.debug(
            "Contenedor sellado: version=0x%02x algoritmo=%s bytes=%d",
            version,
            self.algorithm.value,
            len(ciphertext),
        )
        return container

    def open(
        self,
        container: ContainerInput,
        key: bytes,
        associated_data: Optional[bytes] = None,
    ) -> T:
        """Verifica, descifra y decodifica un contenedor.

        Args:
            container (ContainerInput): Contenedor o sus bytes serializados.
            key (bytes): Clave con la que se selló.
            associated_data (Optional[bytes]): Los mismos datos asociados que
                se pasaron a `seal`, o `None` si no se pasaron.

        Returns:
            T: Valor original.

        Raises:
            InvalidKeyLength: Clave con longitud incorrecta.
            MalformedContainer: Entrada demasiado corta o no binaria.
            UnsupportedVersion: Versión desconocida; no se intenta descifrar.
            AuthenticationFailed: Tag inválido, clave errónea o AAD distinta.
            DeserializationError: Los bytes no encajan con el codec.

        """

        self.engine.check_key(key)
        if not isinstance(container, EncryptedContainer):
            container = EncryptedContainer.from_bytes(container)
        if container.has_associated_data != (associated_data is not None):
            raise AuthenticationFailed("Los datos asociados no coinciden con los del sellado.")

        plaintext = _ENGINES[container.algorithm].decrypt(
            key,
            container.nonce,
            container.ciphertext,
            container.tag,
            container.bound_data(associated_data),
        )
        try:
            return self.codec.decode(plaintext)
        except SealboxError:
            raise
        except Exception as exc:
            raise DeserializationError("El codec no pudo reconstruir el valor.") from exc
        finally:
            del plaintext

    def try_open(
        self,
        container: ContainerInput,
        key: bytes,
        associated_data: Optional[bytes] = None,
    ) -> OpenOutcome:
        """Como `open`, pero devuelve un `OpenOutcome` en lugar de lanzar."""

        try:
            value = self.open(container, key, associated_data)
        except SealboxError as exc:
            logger.debug("Apertura fallida: %s", type(exc).__name__)
            return OpenOutcome(ok=False, error=exc)
        return OpenOutcome(ok=True, value=value)

    def reseal(
        self,
        container: ContainerInput,
        old_key: bytes,
        new_key: bytes,
        associated_data: Optional[bytes] = None,
    ) -> EncryptedContainer:
        """Abre con la clave antigua y sella de nuevo con la nueva.

        El contenedor original no se modifica; el nuevo lleva nonce propio y
        el algoritmo de este `Sealer`.
        """

        self.engine.check_key(new_key)
        value = self.open(container, old_key, associated_data)
        return self.seal(value, new_key, associated_data)


_DEFAULT_CODEC = BytesCodec()


def seal(
    value,
    key: bytes,
    codec: Optional[Codec] = None,
    *,
    algorithm: Algorithm = Algorithm.AES_256_GCM,
    associated_data: Optional[bytes] = None,
) -> EncryptedContainer:
    """Atajo de `Sealer(codec, algorithm).seal(value, key)`."""

    return Sealer(codec or _DEFAULT_CODEC, algorithm).seal(value, key, associated_data)


def open_container(
    container: ContainerInput,
    key: bytes,
    codec: Optional[Codec] = None,
    *,
    associated_data: Optional[bytes] = None,
):
    """Atajo de `Sealer(codec).open(container, key)`."""

    return Sealer(codec or _DEFAULT_CODEC).open(container, key, associated_data)
