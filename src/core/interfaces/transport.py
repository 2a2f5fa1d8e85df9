"""Contrato del transporte HTTP.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite sustituir httpx por un stub en tests sin acoplar el Core a la red.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import RequestSpec, ResponseSpec


@runtime_checkable
class Transport(Protocol):
    """Contrato mínimo para enviar una request.

    Reglas de diseño:
    - `send` es la única operación bloqueante del sistema.
    - Los fallos de red se lanzan como `TransportError`, sin reintentos.
    """

    def send(self, request: RequestSpec) -> ResponseSpec:
        """Envía `request` y devuelve la response normalizada."""

        ...
