"""`python -m cli ...` con el paquete instalado (`pip install -e .`)."""

from cli.main import run

run()
