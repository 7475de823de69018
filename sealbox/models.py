# --------------------------------------------------------------
# File: models.py
# Description: Modelos de datos devueltos por la capa de sellado.
# --------------------------------------------------------------
"""Modelos Pydantic auxiliares de `sealbox`."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from sealbox.errors import SealboxError


class OpenOutcome(BaseModel):
    """Resultado explícito de `Sealer.try_open`.

    Attributes:
        ok (bool): Indica si el contenedor se abrió y decodificó.
        value (Any): Valor recuperado cuando `ok` es verdadero.
        error (Optional[SealboxError]): Error tipado cuando `ok` es falso.

    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    ok: bool
    value: Any = None
    error: Optional[SealboxError] = None

    @property
    def error_kind(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None
