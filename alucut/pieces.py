"""
Generador de piezas: despiece de una ventana en longitudes de corte por familia
"""

import logging
from typing import Dict, List, Optional

from .exceptions import InvalidMeasurementError, UnknownFormulaError
from .formulas import WindowFormula, get_formula
from .models import CutPiece, ProfileFamily, ZocloPosition
from .units import is_valid_length, to_cm, to_units

logger = logging.getLogger(__name__)

# Familias que salen del despiece completo; el cabezal usa la fórmula del zócalo
# y solo se calcula cuando se pide, según el perfil elegido para cada posición
DEFAULT_FAMILIES = [family for family in ProfileFamily if family is not ProfileFamily.CABEZAL]


def build_pieces(
    window_type,
    line,
    width: float,
    height: float,
    window_id: str,
    family: Optional[ProfileFamily] = None,
) -> Dict[ProfileFamily, List[CutPiece]]:
    """
    Calcula las piezas de cada familia de perfil para una ventana

    Args:
        window_type: Tipo de ventana (WindowType o su etiqueta)
        line: Línea de perfilería (Line o etiqueta)
        width: Ancho de la ventana (cm)
        height: Alto de la ventana (cm)
        window_id: Identificador que se copia en cada pieza
        family: Si se indica, solo se calcula esa familia (CABEZAL incluido)

    Returns:
        Diccionario familia -> piezas, en orden fijo

    Raises:
        UnknownFormulaError: combinación tipo/línea sin fórmula
        InvalidMeasurementError: medidas no positivas o menores que los descuentos
    """
    formula = get_formula(window_type, line)

    if not is_valid_length(width) or not is_valid_length(height):
        raise InvalidMeasurementError(
            f"{window_id}: medidas inválidas ({width} x {height})"
        )

    families = [ProfileFamily(family)] if family is not None else DEFAULT_FAMILIES
    builder = _PieceBuilder(formula, float(width), float(height), window_id)

    pieces = {}
    for current in families:
        pieces[current] = builder.build(current)
    return pieces


def calculate_profile_pieces(
    family,
    window_type,
    line,
    width: float,
    height: float,
    window_id: str,
) -> List[CutPiece]:
    """
    Piezas de una sola familia; una combinación sin fórmula devuelve lista vacía
    """
    try:
        return build_pieces(window_type, line, width, height, window_id, family)[ProfileFamily(family)]
    except UnknownFormulaError as e:
        logger.warning("%s (%s)", e, window_id)
        return []


class _PieceBuilder:
    """Aplica una fórmula a unas medidas concretas"""

    def __init__(self, formula: WindowFormula,
                 width: float, height: float, window_id: str):
        self.formula = formula
        self.width = width
        self.height = height
        self.window_id = window_id

    def build(self, family: ProfileFamily) -> List[CutPiece]:
        handler = {
            ProfileFamily.JAMBA: self._jamba,
            ProfileFamily.RIEL: self._riel,
            ProfileFamily.RIEL_ADICIONAL: self._riel_adicional,
            ProfileFamily.CERCO: lambda: self._sash_pieces("cerco"),
            ProfileFamily.TRASLAPE: lambda: self._sash_pieces("traslape"),
            ProfileFamily.ZOCLO: lambda: self._zoclo("zoclo"),
            ProfileFamily.CABEZAL: lambda: self._zoclo("cabezal"),
        }[family]
        pieces = handler()
        logger.debug("%s: %d piezas de %s", self.window_id, len(pieces), family.value)
        return pieces

    def _piece(self, length: float, piece_type: str) -> CutPiece:
        units = to_units(length)
        if units <= 0:
            raise InvalidMeasurementError(
                f"{self.window_id}: {piece_type} resulta de {length:.2f}cm "
                f"({self.width} x {self.height})"
            )
        return CutPiece(length=to_cm(units), source_tag=self.window_id, piece_type=piece_type)

    def _jamba(self) -> List[CutPiece]:
        vertical = self.height - self.formula.jamba_vertical_height
        return [
            self._piece(vertical, "jamba_vertical_1"),
            self._piece(vertical, "jamba_vertical_2"),
            self._piece(self.width, "jamba_horizontal"),
        ]

    def _riel(self) -> List[CutPiece]:
        return [self._piece(self.width, "riel_principal")]

    def _riel_adicional(self) -> List[CutPiece]:
        if not self.formula.has_riel_adicional:
            return []
        length = self.width - self.formula.riel_adicional_width
        return [self._piece(length, "riel_adicional")]

    def _sash_pieces(self, prefix: str) -> List[CutPiece]:
        pieces = []
        sashes = (
            ("ventila_fija", self.formula.fixed_sashes, self.formula.ventila_fija_height),
            ("ventila_corrediza", self.formula.sliding_sashes, self.formula.ventila_corr_height),
        )
        for kind, count, deduction in sashes:
            for i in range(1, count + 1):
                suffix = f"_{i}" if count > 1 else ""
                pieces.append(self._piece(self.height - deduction, f"{prefix}_{kind}{suffix}"))
        return pieces

    def _zoclo(self, prefix: str) -> List[CutPiece]:
        per_position = self.formula.zoclo_divisor
        length = (self.width - self.formula.zoclo_width) / per_position

        pieces = []
        for i in range(1, 2 * per_position + 1):
            position = ZocloPosition.SUPERIOR if i <= per_position else ZocloPosition.INFERIOR
            pieces.append(self._piece(length, f"{prefix}_{position.value}_{i}"))
        return pieces
