"""
Núcleo de Alucut: optimización de corte de barras de perfil (1D)

Regla principal: nunca se unen dos sobrantes para formar una pieza. Si una
pieza no cabe entera en un único sobrante, se compra una barra nueva.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from . import settings
from .exceptions import InvalidParametersError
from .models import (
    CutPiece, CutTrace, CutsBreakdown, CuttingResult, FitPolicy, ProfileCut
)
from .units import to_cm, to_units

logger = logging.getLogger(__name__)


@dataclass
class Offcut:
    """Sobrante disponible en el pool, en unidades internas"""
    length: int
    profile_number: int


class OffcutPool:
    """
    Multiconjunto de sobrantes de una única optimización

    El pool vive dentro de una llamada a ``optimize`` y se descarta con ella.
    """

    def __init__(self, fit_policy: FitPolicy = FitPolicy.BEST_FIT):
        self.fit_policy = FitPolicy(fit_policy)
        self._offcuts: List[Offcut] = []
        self._selectors = {
            FitPolicy.FIRST_FIT: self._first_fit_index,
            FitPolicy.BEST_FIT: self._best_fit_index,
        }

    def __len__(self) -> int:
        return len(self._offcuts)

    def put(self, length: int, profile_number: int) -> None:
        """Agrega un sobrante solo si su longitud es estrictamente positiva"""
        if length > 0:
            self._offcuts.append(Offcut(length, profile_number))

    def take(self, length: int) -> Optional[Offcut]:
        """
        Retira del pool un sobrante que contenga la pieza completa

        Args:
            length: Longitud de la pieza (unidades internas)

        Returns:
            El sobrante retirado o None si ninguno alcanza
        """
        index = self._selectors[self.fit_policy](length)
        if index is None:
            return None
        return self._offcuts.pop(index)

    def lengths(self) -> List[int]:
        """Longitudes del pool de mayor a menor"""
        return sorted((offcut.length for offcut in self._offcuts), reverse=True)

    def _first_fit_index(self, length: int) -> Optional[int]:
        for i, offcut in enumerate(self._offcuts):
            if offcut.length >= length:
                return i
        return None

    def _best_fit_index(self, length: int) -> Optional[int]:
        best = None
        for i, offcut in enumerate(self._offcuts):
            if offcut.length < length:
                continue
            # Empate: gana el primero en orden del pool
            if best is None or offcut.length < self._offcuts[best].length:
                best = i
        return best


class CuttingOptimizer:
    """
    Optimizador de corte First-Fit-Decreasing con reutilización de sobrantes
    """

    def __init__(self, fit_policy=None):
        """
        Inicializa el optimizador

        Args:
            fit_policy: Política de elección de sobrante (por defecto la de settings)
        """
        self.fit_policy = FitPolicy(fit_policy or settings.DEFAULT_FIT_POLICY)

    def optimize(self, pieces: Iterable, stock_length: float = None) -> CuttingResult:
        """
        Calcula cuántas barras nuevas hay que comprar y qué sobrantes quedan

        Args:
            pieces: Piezas a cortar (CutPiece, dict o longitud en cm)
            stock_length: Longitud de la barra de stock (cm)

        Returns:
            Resultado de la optimización

        Raises:
            InvalidParametersError: longitudes no positivas o no finitas
        """
        start_time = time.perf_counter()
        if stock_length is None:
            stock_length = settings.DEFAULT_STOCK_LENGTH

        stock_units = self._validate_stock_length(stock_length)
        prepared = self._prepare_pieces(pieces)

        expanded = self._expand_pieces(prepared, stock_units)
        # sorted() es estable: piezas iguales conservan el orden de entrada
        ordered = sorted(expanded, key=lambda item: item[0], reverse=True)

        result = self._pack(ordered, stock_units)
        result.metadata.update({
            "success": True,
            "input_pieces": len(prepared),
            "expanded_pieces": len(expanded),
            "processing_time": (time.perf_counter() - start_time) * 1000,
        })

        logger.info(
            "Optimización: %d piezas, %d barras nuevas de %scm, sobrantes %s",
            len(expanded), result.pieces_needed, stock_length, result.remainders
        )
        return result

    def optimize_safe(self, pieces: Iterable, stock_length: float = None) -> CuttingResult:
        """Como ``optimize`` pero nunca lanza; los errores quedan en metadata"""
        try:
            return self.optimize(pieces, stock_length)
        except InvalidParametersError as e:
            logger.warning("Optimización rechazada: %s", e)
            return CuttingResult(
                stock_length=self._safe_float(stock_length),
                fit_policy=self.fit_policy,
                metadata={"success": False, "error": str(e)},
            )

    def _validate_stock_length(self, stock_length) -> int:
        try:
            value = float(stock_length)
        except (TypeError, ValueError):
            raise InvalidParametersError(f"Longitud de barra inválida: {stock_length!r}") from None
        if not math.isfinite(value) or value <= 0:
            raise InvalidParametersError(f"La longitud de barra debe ser positiva y finita: {stock_length}")

        units = to_units(value)
        if units <= 0:
            raise InvalidParametersError(f"Longitud de barra demasiado pequeña: {stock_length}")
        return units

    def _prepare_pieces(self, pieces: Iterable) -> List[Tuple[int, CutPiece]]:
        """Normaliza la entrada y ajusta cada longitud a la rejilla de unidades"""
        try:
            items = list(pieces) if pieces is not None else []
        except TypeError:
            raise InvalidParametersError(f"Se esperaba una lista de piezas: {pieces!r}") from None

        prepared = []
        for raw in items:
            if isinstance(raw, CutPiece):
                piece = raw
            elif isinstance(raw, dict):
                try:
                    piece = CutPiece(**raw)
                except ValidationError as e:
                    raise InvalidParametersError(f"Pieza inválida: {raw!r}") from e
            elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
                piece = CutPiece(length=raw)
            else:
                raise InvalidParametersError(f"Pieza no reconocida: {raw!r}")

            if not math.isfinite(piece.length) or piece.length <= 0:
                raise InvalidParametersError(
                    f"Longitud de pieza inválida: {piece.length} ({piece.piece_type or 'pieza'})"
                )
            units = to_units(piece.length)
            if units <= 0:
                raise InvalidParametersError(f"Pieza demasiado corta: {piece.length}cm")
            # La pieza del resultado lleva la misma longitud con la que se empaqueta
            if to_cm(units) != piece.length:
                piece = piece.model_copy(update={"length": to_cm(units)})
            prepared.append((units, piece))
        return prepared

    def _expand_pieces(self, prepared: List[Tuple[int, CutPiece]], stock_units: int) -> List[Tuple[int, CutPiece]]:
        """Divide las piezas más largas que la barra en barras completas y un resto"""
        expanded = []
        for units, piece in prepared:
            if units <= stock_units:
                expanded.append((units, piece))
                continue

            complete, rest = divmod(units, stock_units)
            label = piece.piece_type or "pieza"
            logger.debug(
                "Pieza de %scm supera la barra: %d completas + %scm",
                piece.length, complete, to_cm(rest)
            )
            for i in range(1, complete + 1):
                expanded.append((stock_units, piece.model_copy(update={
                    "length": to_cm(stock_units),
                    "piece_type": f"{label}_parte_{i}",
                })))
            if rest > 0:
                expanded.append((rest, piece.model_copy(update={
                    "length": to_cm(rest),
                    "piece_type": f"{label}_sobrante",
                })))
        return expanded

    def _pack(self, ordered: List[Tuple[int, CutPiece]], stock_units: int) -> CuttingResult:
        pool = OffcutPool(self.fit_policy)
        breakdown = CutsBreakdown()
        profiles: Dict[int, ProfileCut] = {}

        for units, piece in ordered:
            offcut = pool.take(units)

            if offcut is not None:
                residual = offcut.length - units
                pool.put(residual, offcut.profile_number)
                breakdown.from_remainders.append(piece)
                profiles[offcut.profile_number].cuts.append(
                    CutTrace(piece=piece, remainder_after_cut=to_cm(residual))
                )
                logger.debug("%scm cortada de sobrante de %scm", piece.length, to_cm(offcut.length))
                continue

            profile_number = len(profiles) + 1
            residual = stock_units - units
            pool.put(residual, profile_number)
            breakdown.from_new_profile.append(piece)
            profiles[profile_number] = ProfileCut(
                profile_number=profile_number,
                cuts=[CutTrace(piece=piece, remainder_after_cut=to_cm(residual))],
            )
            logger.debug("Barra nueva #%d: %scm, sobrante %scm", profile_number, piece.length, to_cm(residual))

        breakdown.new_profiles_required = len(profiles)

        return CuttingResult(
            pieces_needed=len(profiles),
            remainders=[to_cm(length) for length in pool.lengths()],
            cuts=breakdown,
            detailed_cuts=list(profiles.values()),
            stock_length=to_cm(stock_units),
            fit_policy=self.fit_policy,
        )

    @staticmethod
    def _safe_float(value) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0


def optimize_cutting(pieces: Iterable, stock_length: float = None, fit_policy=None) -> CuttingResult:
    """Atajo para una optimización con un optimizador nuevo"""
    return CuttingOptimizer(fit_policy).optimize(pieces, stock_length)
