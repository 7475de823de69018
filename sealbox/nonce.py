# --------------------------------------------------------------
# File: nonce.py
# Description: Generadores de nonces únicos por operación de sellado.
# --------------------------------------------------------------
"""Generación de nonces: aleatoria por defecto y por contador persistente.

El modo aleatorio extrae los 96 bits completos de `os.urandom` en cada
llamada, de modo que hilos concurrentes no necesitan coordinarse. El modo
contador reserva bloques en disco antes de emitirlos: tras un reinicio se
continúa por encima de cualquier nonce ya entregado.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Optional

from sealbox.cipher import NONCE_SIZE
from sealbox.errors import EntropyUnavailable, NonceExhausted, SealboxError

__all__ = ["NonceGenerator", "RandomNonceGenerator", "CounterNonceGenerator"]

logger = logging.getLogger(__name__)

PREFIX_SIZE = 4


def _urandom(length: int) -> bytes:
    try:
        return os.urandom(length)
    except (OSError, NotImplementedError) as exc:
        raise EntropyUnavailable("No se pudo obtener aleatoriedad segura del sistema.") from exc


class NonceGenerator(ABC):
    """Interfaz común: cada llamada a `next()` devuelve un nonce nuevo."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Longitud del nonce en bytes."""

    @abstractmethod
    def next(self) -> bytes:
        """Devuelve un nonce que no se ha emitido antes."""


class RandomNonceGenerator(NonceGenerator):
    """Nonces aleatorios de longitud completa (estrategia por defecto)."""

    def __init__(self, size: int = NONCE_SIZE) -> None:
        if size < 12:
            raise ValueError("Un nonce aleatorio necesita al menos 96 bits.")
        self._size = size

    @property
    def size(self) -> int:
        return self._size

    def next(self) -> bytes:
        return _urandom(self._size)


class CounterNonceGenerator(NonceGenerator):
    """Nonces `prefijo aleatorio (4 B) || contador big-endian (8 B)`.

    Args:
        state_path (str): Fichero donde persistir prefijo y marca de agua.
            Es obligatorio: un contador que no sobrevive a un reinicio vuelve
            a emitir nonces ya usados.
        size (int): Longitud total del nonce en bytes.
        reserve (int): Nonces reservados por cada escritura en disco.

    """

    def __init__(
        self,
        state_path: str,
        *,
        size: int = NONCE_SIZE,
        reserve: int = 1024,
    ) -> None:
        if not state_path:
            raise ValueError("El modo contador exige un fichero de estado persistente.")
        if size <= PREFIX_SIZE:
            raise ValueError(f"El nonce debe superar {PREFIX_SIZE} bytes.")
        if reserve < 1:
            raise ValueError("reserve debe ser positivo.")
        self._size = size
        self._counter_bytes = size - PREFIX_SIZE
        self._limit = 1 << (8 * self._counter_bytes)
        self._state_path = state_path
        self._reserve = reserve
        self._lock = threading.Lock()

        state = self._load_state()
        if state is None:
            self._prefix = _urandom(PREFIX_SIZE)
            self._next = 0
        else:
            self._prefix, self._next = state
        # Nada reservado aún: la primera llamada persiste el primer bloque.
        self._reserved_until = self._next

    @property
    def size(self) -> int:
        return self._size

    def next(self) -> bytes:
        with self._lock:
            if self._next >= self._limit:
                raise NonceExhausted("Espacio de contador agotado para este prefijo.")
            if self._next >= self._reserved_until:
                self._reserve_block()
            value = self._next
            self._next += 1
        return self._prefix + value.to_bytes(self._counter_bytes, "big")

    def _reserve_block(self) -> None:
        high = min(self._next + self._reserve, self._limit)
        self._save_state(high)
        logger.debug("Bloque de nonces reservado hasta %d", high)
        self._reserved_until = high

    def _load_state(self) -> Optional[tuple]:
        """Lee el estado persistido; `None` si el fichero no existe."""

        try:
            with open(self._state_path, "r", encoding="utf-8") as handler:
                raw = json.load(handler)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as exc:
            raise SealboxError("Estado del contador de nonces ilegible.") from exc

        # Continuar sin estado válido podría repetir nonces: se aborta.
        try:
            prefix = bytes.fromhex(raw["prefix"])
            high_water = int(raw["high_water"])
            size = raw["size"]
        except (TypeError, KeyError, ValueError) as exc:
            raise SealboxError("Estado del contador de nonces ilegible.") from exc
        if len(prefix) != PREFIX_SIZE or size != self._size:
            raise SealboxError("Estado del contador incompatible con este tamaño de nonce.")
        return prefix, high_water

    def _save_state(self, high_water: int) -> None:
        """Guarda prefijo y marca de agua con escritura atómica."""

        parent = os.path.dirname(self._state_path) or "."
        os.makedirs(parent, exist_ok=True)
        tmp_path = f"{self._state_path}.tmp"
        state = {"size": self._size, "prefix": self._prefix.hex(), "high_water": high_water}
        with open(tmp_path, "w", encoding="utf-8") as handler:
            json.dump(state, handler)
            handler.flush()
            os.fsync(handler.fileno())
        os.replace(tmp_path, self._state_path)
