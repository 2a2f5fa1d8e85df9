"""Exportación JSON del intercambio request/response.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines.
- Permite guardar evidencia del intercambio sin depender del render de terminal.
"""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

from core.domain.models import RequestSpec, ResponseSpec
from core.services.request_builder import request_url


def _response_payload(response: ResponseSpec) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "status_code": response.status_code,
        "http_version": response.http_version,
        "reason": response.reason,
        "headers": [[name, value] for name, value in response.headers],
        "content_type": response.content_type,
    }
    try:
        payload["body"] = response.body_bytes.decode("utf-8")
        payload["body_encoding"] = "utf-8"
    except UnicodeDecodeError:
        payload["body"] = base64.b64encode(response.body_bytes).decode("ascii")
        payload["body_encoding"] = "base64"
    return payload


def export_exchange_json(
    *,
    request: RequestSpec,
    response: ResponseSpec,
    output_path: Path,
) -> Path:
    """Exporta el intercambio a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "request": {
            **request.model_dump(mode="json"),
            "final_url": request_url(request),
        },
        "response": _response_payload(response),
    }
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    return output_path
