# --------------------------------------------------------------
# File: __init__.py
# Description: API pública del contenedor cifrado `sealbox`.
# --------------------------------------------------------------
"""Contenedor cifrado y autenticado para cualquier valor serializable."""

from sealbox.cipher import Algorithm, CipherEngine, generate_key
from sealbox.codecs import BytesCodec, Codec, JsonCodec, PydanticCodec, Utf8Codec
from sealbox.container import EncryptedContainer
from sealbox.errors import (
    AuthenticationFailed,
    DeserializationError,
    EntropyUnavailable,
    InvalidKeyLength,
    InvalidNonceLength,
    MalformedContainer,
    MessageTooLarge,
    NonceExhausted,
    SealboxError,
    SerializationError,
    UnsupportedVersion,
)
from sealbox.models import OpenOutcome
from sealbox.nonce import CounterNonceGenerator, NonceGenerator, RandomNonceGenerator
from sealbox.sealer import Sealer, open_container, seal

__version__ = "0.1.0"

__all__ = [
    "Algorithm",
    "AuthenticationFailed",
    "BytesCodec",
    "CipherEngine",
    "Codec",
    "CounterNonceGenerator",
    "DeserializationError",
    "EncryptedContainer",
    "EntropyUnavailable",
    "InvalidKeyLength",
    "InvalidNonceLength",
    "JsonCodec",
    "MalformedContainer",
    "MessageTooLarge",
    "NonceExhausted",
    "NonceGenerator",
    "OpenOutcome",
    "PydanticCodec",
    "RandomNonceGenerator",
    "SealboxError",
    "Sealer",
    "SerializationError",
    "UnsupportedVersion",
    "Utf8Codec",
    "generate_key",
    "open_container",
    "seal",
]
