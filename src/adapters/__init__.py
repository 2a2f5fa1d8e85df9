"""Adaptadores de infraestructura (transporte httpx, exportación)."""
