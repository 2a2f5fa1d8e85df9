"""Servicios del Core (clasificación, coerción, builder, renderer)."""
