# --------------------------------------------------------------
# File: test_cipher.py
# Description: Pruebas del motor AEAD (AES-GCM y ChaCha20-Poly1305).
# --------------------------------------------------------------

import os

import pytest

import sealbox.cipher as cipher_module
from sealbox import BytesCodec, Sealer
from sealbox.cipher import Algorithm, CipherEngine, generate_key
from sealbox.errors import (
    AuthenticationFailed,
    InvalidKeyLength,
    InvalidNonceLength,
    MessageTooLarge,
)

ALGORITHMS = [Algorithm.AES_256_GCM, Algorithm.CHACHA20_POLY1305]


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_roundtrip_ok(algorithm):
    """Comprueba que el cifrado se revierte y conserva la longitud.

    Returns:
        None: Las aserciones comparan claro, descifrado y longitudes.
    """
    engine = CipherEngine(algorithm)
    key = os.urandom(32)
    nonce = os.urandom(12)
    plaintext = os.urandom(128)
    ct, tag = engine.encrypt(key, nonce, plaintext, b"ctx")
    assert len(ct) == len(plaintext)
    assert len(tag) == 16
    assert engine.decrypt(key, nonce, ct, tag, b"ctx") == plaintext


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_detects_tampering(algorithm):
    """Verifica que alterar ciphertext, tag, nonce o AAD invalide el descifrado.

    Returns:
        None: Se espera AuthenticationFailed en cada caso.
    """
    engine = CipherEngine(algorithm)
    key = os.urandom(32)
    nonce = os.urandom(12)
    ct, tag = engine.encrypt(key, nonce, b"hola mundo", b"aad")

    flip = lambda data: bytes([data[0] ^ 1]) + data[1:]
    with pytest.raises(AuthenticationFailed):
        engine.decrypt(key, nonce, flip(ct), tag, b"aad")
    with pytest.raises(AuthenticationFailed):
        engine.decrypt(key, nonce, ct, flip(tag), b"aad")
    with pytest.raises(AuthenticationFailed):
        engine.decrypt(key, flip(nonce), ct, tag, b"aad")
    with pytest.raises(AuthenticationFailed):
        engine.decrypt(key, nonce, ct, tag, b"otra")


def test_wrong_key_fails():
    """Garantiza que otra clave no descifre el mensaje.

    Returns:
        None: Se espera AuthenticationFailed.
    """
    engine = CipherEngine()
    nonce = os.urandom(12)
    ct, tag = engine.encrypt(os.urandom(32), nonce, b"secreto")
    with pytest.raises(AuthenticationFailed):
        engine.decrypt(os.urandom(32), nonce, ct, tag)


@pytest.mark.parametrize("size", [0, 16, 31, 33, 64])
def test_rejects_key_length(size):
    """Comprueba que claves de longitud incorrecta se rechacen antes de cifrar.

    Args:
        size (int): Longitud de clave probada.

    Returns:
        None: Se espera InvalidKeyLength con los tamaños informados.
    """
    engine = CipherEngine()
    with pytest.raises(InvalidKeyLength) as info:
        engine.encrypt(bytes(size), bytes(12), b"x")
    assert info.value.expected == 32
    assert info.value.actual == size


def test_rejects_nonce_length():
    """Verifica que un nonce de longitud incorrecta se rechace.

    Returns:
        None: Se espera InvalidNonceLength al cifrar y al descifrar.
    """
    engine = CipherEngine(Algorithm.CHACHA20_POLY1305)
    with pytest.raises(InvalidNonceLength):
        engine.encrypt(bytes(32), bytes(8), b"x")
    with pytest.raises(InvalidNonceLength):
        engine.decrypt(bytes(32), bytes(16), b"x", bytes(16))


def test_short_tag_is_authentication_failure():
    """Un tag truncado se trata como fallo de autenticación.

    Returns:
        None: Se espera AuthenticationFailed.
    """
    engine = CipherEngine()
    key = os.urandom(32)
    nonce = os.urandom(12)
    ct, tag = engine.encrypt(key, nonce, b"msg")
    with pytest.raises(AuthenticationFailed):
        engine.decrypt(key, nonce, ct, tag[:8])


def test_generate_key_length():
    """Comprueba que las claves generadas tengan 32 bytes y sean distintas.

    Returns:
        None: Las aserciones revisan longitud y unicidad.
    """
    k1 = generate_key()
    k2 = generate_key(Algorithm.CHACHA20_POLY1305)
    assert len(k1) == len(k2) == 32
    assert k1 != k2


def test_algorithm_from_string():
    """El enum acepta el nombre textual del algoritmo.

    Returns:
        None: La aserción compara el miembro resultante.
    """
    assert CipherEngine("chacha20-poly1305").algorithm is Algorithm.CHACHA20_POLY1305


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_message_size_limit_checked_before_aead(algorithm, monkeypatch):
    """Un claro mayor que el máximo se rechaza sin invocar la primitiva AEAD.

    Args:
        algorithm (Algorithm): Algoritmo probado.
        monkeypatch (pytest.MonkeyPatch): Fixture para reducir el límite.

    Returns:
        None: Se espera MessageTooLarge en el motor y en Sealer.seal.
    """

    def _no_aead(_key):
        raise AssertionError("la primitiva AEAD no debe construirse")

    monkeypatch.setattr(cipher_module, "MAX_MESSAGE_SIZE", 8)
    monkeypatch.setitem(cipher_module._PRIMITIVES, algorithm, _no_aead)
    key = os.urandom(32)
    with pytest.raises(MessageTooLarge):
        CipherEngine(algorithm).encrypt(key, os.urandom(12), b"x" * 9)
    with pytest.raises(MessageTooLarge):
        Sealer(BytesCodec(), algorithm=algorithm).seal(b"x" * 9, key)


def test_message_at_limit_is_accepted(monkeypatch):
    """Un claro exactamente del tamaño máximo se cifra con normalidad.

    Returns:
        None: La aserción compara la longitud del ciphertext.
    """
    monkeypatch.setattr(cipher_module, "MAX_MESSAGE_SIZE", 8)
    ct, _tag = CipherEngine().encrypt(os.urandom(32), os.urandom(12), b"x" * 8)
    assert len(ct) == 8
