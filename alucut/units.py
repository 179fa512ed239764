"""
Conversión de longitudes entre centímetros y unidades internas de punto fijo

Internamente todas las longitudes son enteros en centésimas de centímetro
(décimas de milímetro). Solo se convierte a centímetros en los bordes.
"""

import math
from decimal import Decimal, ROUND_HALF_UP

UNITS_PER_CM = 100


def to_units(length_cm: float) -> int:
    """
    Convierte centímetros a unidades internas

    Args:
        length_cm: Longitud en centímetros

    Returns:
        Longitud entera en centésimas de centímetro
    """
    if not math.isfinite(length_cm):
        raise ValueError(f"Longitud no finita: {length_cm}")
    scaled = Decimal(repr(float(length_cm))) * UNITS_PER_CM
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_cm(units: int) -> float:
    """Convierte unidades internas a centímetros"""
    return units / UNITS_PER_CM


def is_valid_length(length_cm) -> bool:
    """Indica si un valor es una longitud finita y estrictamente positiva"""
    try:
        value = float(length_cm)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0
