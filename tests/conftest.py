# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas para claves, sealers y entorno aislado.
# --------------------------------------------------------------

import logging
import os
from typing import Iterator

import pytest

from sealbox import BytesCodec, Sealer, Utf8Codec


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path) -> Iterator[None]:
    """Elimina variables SEALBOX_*, evita leer un `.env` del repositorio y
    restaura el nivel del logger del paquete.

    Args:
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar el entorno.
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        Iterator[None]: Control del fixture autouse durante cada test.
    """
    for name in list(os.environ):
        if name.startswith("SEALBOX_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    package_logger = logging.getLogger("sealbox")
    previous = package_logger.level
    yield
    package_logger.setLevel(previous)


@pytest.fixture
def key() -> bytes:
    """Clave aleatoria de 256 bits."""
    return os.urandom(32)


@pytest.fixture
def zero_key() -> bytes:
    """Clave fija de 32 bytes a cero."""
    return bytes(32)


@pytest.fixture
def bytes_sealer() -> Sealer:
    """Sealer por defecto sobre bytes."""
    return Sealer(BytesCodec())


@pytest.fixture
def text_sealer() -> Sealer:
    """Sealer de cadenas UTF-8."""
    return Sealer(Utf8Codec())
