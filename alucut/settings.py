"""
Configuración de Alucut

Los valores se leen del entorno (o de un archivo .env) al importar el módulo.
Un valor inválido detiene la importación con InvalidParametersError.
"""

import math
import os

from dotenv import load_dotenv

from .exceptions import InvalidParametersError

load_dotenv()

FIT_POLICIES = ("best_fit", "first_fit")


def parse_stock_length(value: str) -> float:
    try:
        length = float(value)
    except (TypeError, ValueError):
        raise InvalidParametersError(f"ALUCUT_STOCK_LENGTH inválido: {value!r}") from None
    if not math.isfinite(length) or length <= 0:
        raise InvalidParametersError(f"ALUCUT_STOCK_LENGTH debe ser positivo: {value!r}")
    return length


def parse_fit_policy(value: str) -> str:
    policy = str(value).strip().lower()
    if policy not in FIT_POLICIES:
        raise InvalidParametersError(
            f"ALUCUT_FIT_POLICY inválido: {value!r} (opciones: {', '.join(FIT_POLICIES)})"
        )
    return policy


# Longitud del perfil de stock en cm (barra de 6 m)
DEFAULT_STOCK_LENGTH = parse_stock_length(os.getenv("ALUCUT_STOCK_LENGTH", "600"))

# Política de elección de sobrante: "best_fit" o "first_fit"
DEFAULT_FIT_POLICY = parse_fit_policy(os.getenv("ALUCUT_FIT_POLICY", "best_fit"))

LOG_LEVEL = os.getenv("ALUCUT_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

API_HOST = os.getenv("ALUCUT_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("ALUCUT_API_PORT", "8000"))
