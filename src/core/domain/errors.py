"""Errores del Core.

Todos los errores de clasificación/construcción se lanzan antes de tocar la red.
"""

from __future__ import annotations


class ReqlineError(Exception):
    """Base de los errores de reqline."""


class MalformedItemError(ReqlineError):
    def __init__(self, token: str, reason: str = "no separator found") -> None:
        self.token = token
        self.reason = reason
        super().__init__(f'"{token}": {reason}')


class InvalidJsonLiteralError(ReqlineError):
    def __init__(self, key: str, raw_value: str, detail: str = "") -> None:
        self.key = key
        self.raw_value = raw_value
        message = f'"{key}:={raw_value}": invalid JSON literal'
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ConflictingBodyTypeError(ReqlineError):
    def __init__(self, token: str, locked: str) -> None:
        self.token = token
        self.locked = locked
        super().__init__(f'"{token}": cannot be mixed with a {locked} body')


class InvalidMethodError(ReqlineError):
    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f'"{method}": unsupported HTTP method')


class MalformedResponseBodyError(ReqlineError):
    """Body no parseable pese a su content-type. Nunca sale del renderer."""


class TransportError(ReqlineError):
    """Fallo de red/fichero en el transporte; la causa original va en `__cause__`."""
