"""Core de reqline: gramática de items, modelo de request y renderer.

Por qué separado:
- Es puro y síncrono: no conoce httpx, typer ni rich.
"""
