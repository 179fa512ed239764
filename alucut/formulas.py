"""
Tabla de fórmulas de despiece por (tipo de ventana, línea)

Cada fórmula guarda las constantes de descuento en cm que se restan del
ancho o del alto de la ventana para obtener la longitud de cada pieza.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .exceptions import UnknownFormulaError
from .models import Line, WindowType


@dataclass(frozen=True)
class WindowFormula:
    """Constantes de descuento (cm) de una combinación tipo/línea"""
    jamba_vertical_height: float
    ventila_corr_height: float
    zoclo_width: float
    ventila_fija_height: Optional[float] = None
    riel_adicional_width: Optional[float] = None

    # Cantidad de ventilas de cada clase
    fixed_sashes: int = 0
    sliding_sashes: int = 2

    @property
    def zoclo_divisor(self) -> int:
        """Piezas de zócalo por posición (superior o inferior)"""
        return self.fixed_sashes + self.sliding_sashes

    @property
    def has_riel_adicional(self) -> bool:
        return self.riel_adicional_width is not None


FORMULAS: Dict[Tuple[WindowType, Line], WindowFormula] = {
    (WindowType.FIXED_SLIDING, Line.L3): WindowFormula(
        jamba_vertical_height=2.7,
        ventila_fija_height=2.8,
        ventila_corr_height=3.7,
        zoclo_width=18,
        fixed_sashes=1,
        sliding_sashes=1,
    ),
    (WindowType.DOUBLE_SLIDING, Line.L3): WindowFormula(
        jamba_vertical_height=2.7,
        ventila_corr_height=3.7,
        riel_adicional_width=2.7,
        zoclo_width=18,
        sliding_sashes=2,
    ),
    (WindowType.TWO_FIXED_TWO_SLIDING, Line.L3): WindowFormula(
        jamba_vertical_height=2.7,
        ventila_fija_height=2.8,
        ventila_corr_height=3.7,
        zoclo_width=33.5,
        fixed_sashes=2,
        sliding_sashes=2,
    ),
    (WindowType.FOUR_SLIDING, Line.L3): WindowFormula(
        jamba_vertical_height=2.7,
        ventila_corr_height=3.7,
        riel_adicional_width=2.7,
        zoclo_width=34,
        sliding_sashes=4,
    ),
    (WindowType.FIXED_SLIDING, Line.L2): WindowFormula(
        jamba_vertical_height=2.8,
        ventila_fija_height=3.0,
        ventila_corr_height=4.0,
        zoclo_width=16.2,
        fixed_sashes=1,
        sliding_sashes=1,
    ),
    (WindowType.DOUBLE_SLIDING, Line.L2): WindowFormula(
        jamba_vertical_height=2.8,
        ventila_corr_height=4.0,
        riel_adicional_width=2.7,
        zoclo_width=16.2,
        sliding_sashes=2,
    ),
}


def _check_table() -> None:
    for (window_type, line), formula in FORMULAS.items():
        if formula.fixed_sashes and formula.ventila_fija_height is None:
            raise ValueError(f"{window_type.value} {line.value}: ventila fija sin descuento")
        if formula.zoclo_divisor not in (2, 4):
            raise ValueError(f"{window_type.value} {line.value}: divisor de zócalo inválido")


_check_table()


def get_formula(window_type, line) -> WindowFormula:
    """
    Obtiene la fórmula de una combinación tipo/línea

    Args:
        window_type: WindowType o su etiqueta ("Doble Corrediza", ...)
        line: Line o cualquier etiqueta de línea ("L2", "Línea 3", ...)

    Returns:
        Fórmula de descuentos

    Raises:
        UnknownFormulaError: si la combinación no existe en la tabla
    """
    try:
        window_type = WindowType(window_type)
    except ValueError:
        raise UnknownFormulaError(window_type, line) from None
    if not isinstance(line, Line):
        line = Line.parse(line)

    formula = FORMULAS.get((window_type, line))
    if formula is None:
        raise UnknownFormulaError(window_type, line)
    return formula
