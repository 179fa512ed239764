"""
Agregador de optimización por familia de perfil

Junta las piezas de una familia de todas las ventanas del paquete y llama al
optimizador una sola vez, para que los sobrantes de una ventana sirvan a otra.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from . import settings
from .core import CuttingOptimizer
from .exceptions import InvalidMeasurementError, InvalidParametersError, UnknownFormulaError
from .models import (
    CutPiece, CuttingResult, PackageSummary, ProfileFamily, ProfileSummary, ZocloPosition
)
from .pieces import build_pieces
from .units import is_valid_length, to_units

logger = logging.getLogger(__name__)

# Orden de las corridas del resumen de paquete
PACKAGE_RUNS = [
    (ProfileFamily.JAMBA, None),
    (ProfileFamily.RIEL, None),
    (ProfileFamily.RIEL_ADICIONAL, None),
    (ProfileFamily.CERCO, None),
    (ProfileFamily.TRASLAPE, None),
    (ProfileFamily.ZOCLO, ZocloPosition.SUPERIOR),
    (ProfileFamily.ZOCLO, ZocloPosition.INFERIOR),
    (ProfileFamily.CABEZAL, ZocloPosition.SUPERIOR),
    (ProfileFamily.CABEZAL, ZocloPosition.INFERIOR),
]


def _field(window: Any, name: str) -> Any:
    """Lee un campo de un WindowRecord, de un dict o de cualquier objeto"""
    if isinstance(window, dict):
        return window.get(name)
    return getattr(window, name, None)


def _parse_measure(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if is_valid_length(number) else None


def _assigned_positions(
    window: Any,
    family: ProfileFamily,
    profile_name: Optional[str] = None,
) -> Tuple[ZocloPosition, ...]:
    """
    Posiciones de la ventana que llevan el perfil pedido

    Sin ``zoclo_config`` la ventana lleva zócalo arriba y abajo. Con
    configuración, cada posición cuenta para la familia de su perfil o, si se
    pide un perfil con nombre, solo donde ese nombre está asignado.
    """
    config = _field(window, "zoclo_config")
    if config is None:
        if family is ProfileFamily.ZOCLO and profile_name is None:
            return tuple(ZocloPosition)
        return ()

    positions = []
    for position, name in ((ZocloPosition.SUPERIOR, _field(config, "upper")),
                           (ZocloPosition.INFERIOR, _field(config, "lower"))):
        if not name:
            continue
        if profile_name is not None:
            matches = name == profile_name
        else:
            matches = ProfileFamily.for_profile_name(name) is family
        if matches:
            positions.append(position)
    return tuple(positions)


class ProfileAggregator:
    """
    Optimización de una familia de perfil sobre todas las ventanas cotizadas
    """

    def __init__(self, fit_policy=None):
        self.optimizer = CuttingOptimizer(fit_policy)

    @property
    def fit_policy(self):
        return self.optimizer.fit_policy

    def collect_pieces(
        self,
        family,
        windows: Sequence,
        position_filter=None,
        profile_name: Optional[str] = None,
    ) -> tuple:
        """
        Reúne las piezas de una familia de todas las ventanas

        Args:
            family: Familia de perfil
            windows: Ventanas cotizadas (WindowRecord, dict u objeto)
            position_filter: "superior" / "inferior" para zócalos y cabezales
            profile_name: Perfil de zócalo con nombre; junta sus piezas de
                ambas posiciones

        Returns:
            (piezas, ventanas usadas, ventanas descartadas con su motivo)
        """
        family = self._parse_family(family)
        position = self._parse_position(position_filter)
        if position and not family.is_positional:
            logger.debug("Filtro %s ignorado para %s", position.value, family.value)
            position = None

        pieces: List[CutPiece] = []
        used = 0
        skipped: List[Dict[str, Any]] = []

        for index, window in enumerate(windows, start=1):
            positions = ()
            if family.is_positional:
                positions = _assigned_positions(window, family, profile_name)
                if position:
                    positions = tuple(p for p in positions if p is position)
                if not positions:
                    continue

            window_type = _field(window, "type")
            label = getattr(window_type, "value", window_type)
            window_id = _field(window, "id") or f"Ventana #{index} - {label}"

            width = _parse_measure(_field(window, "width"))
            height = _parse_measure(_field(window, "height"))
            try:
                if width is None or height is None:
                    raise InvalidMeasurementError(
                        f"{window_id}: medidas inválidas "
                        f"({_field(window, 'width')!r} x {_field(window, 'height')!r})"
                    )
                window_pieces = build_pieces(
                    window_type, _field(window, "line") or "", width, height, window_id, family
                )[family]
            except (UnknownFormulaError, InvalidMeasurementError) as e:
                logger.warning("Ventana descartada: %s", e)
                skipped.append({"index": index, "reason": str(e)})
                continue

            if positions:
                window_pieces = [
                    p for p in window_pieces if any(pos.value in p.piece_type for pos in positions)
                ]

            pieces.extend(window_pieces)
            used += 1

        logger.debug(
            "%s%s: %d piezas de %d ventanas",
            profile_name or family.value, f" ({position.value})" if position else "", len(pieces), used
        )
        return pieces, used, skipped

    def aggregate(
        self,
        family,
        windows: Sequence,
        stock_length: float = None,
        position_filter=None,
    ) -> CuttingResult:
        """
        Optimiza una familia de perfil para todo el paquete en una sola corrida

        Args:
            family: Familia de perfil (ProfileFamily o su nombre)
            windows: Ventanas cotizadas
            stock_length: Longitud de barra (cm)
            position_filter: "superior" / "inferior", solo para zócalos y cabezales

        Returns:
            Resultado de la optimización con metadatos del agregado

        Raises:
            InvalidParametersError: familia desconocida o longitud de barra inválida
        """
        family = self._parse_family(family)
        return self._run(family, windows, stock_length, self._parse_position(position_filter))

    def aggregate_profile(
        self,
        profile_name: str,
        windows: Sequence,
        stock_length: float = None,
    ) -> CuttingResult:
        """
        Optimiza un perfil de zócalo con nombre (ej. "CABEZAL_L3")

        Junta las piezas de todas las ventanas donde el perfil está asignado,
        sea como superior o como inferior, porque es la misma barra.

        Raises:
            InvalidParametersError: el nombre no es de un zócalo ni de un cabezal
        """
        family = ProfileFamily.for_profile_name(profile_name)
        if family is None:
            raise InvalidParametersError(f"Perfil de zócalo desconocido: {profile_name!r}")
        return self._run(family, windows, stock_length, None, profile_name)

    def _run(
        self,
        family: ProfileFamily,
        windows: Sequence,
        stock_length: Optional[float],
        position: Optional[ZocloPosition],
        profile_name: Optional[str] = None,
    ) -> CuttingResult:
        if stock_length is None:
            stock_length = settings.DEFAULT_STOCK_LENGTH

        pieces, used, skipped = self.collect_pieces(family, windows, position, profile_name)
        result = self.optimizer.optimize(pieces, stock_length)

        total_units = sum(to_units(piece.length) for piece in pieces)
        result.metadata.update({
            "family": family.value,
            "position_filter": position.value if position and family.is_positional else None,
            "profile_name": profile_name,
            "windows_used": used,
            "windows_skipped": skipped,
            "naive_bars": math.ceil(total_units / to_units(result.stock_length)),
        })
        return result

    def summarize_package(self, windows: Sequence, stock_length: float = None) -> PackageSummary:
        """
        Resumen de barras necesarias por familia para todo el paquete

        La política de sobrantes es la del agregador. Las familias sin piezas
        no aparecen en el resumen.
        """
        if stock_length is None:
            stock_length = settings.DEFAULT_STOCK_LENGTH

        windows = list(windows)
        profiles = []
        for family, position in PACKAGE_RUNS:
            result = self.aggregate(family, windows, stock_length, position)
            if result.metadata["input_pieces"]:
                profiles.append(self._summary_row(result, family, position))

        summary = PackageSummary(
            stock_length=float(stock_length),
            windows_total=len(windows),
            profiles=profiles,
        )
        logger.info(
            "Paquete de %d ventanas: %d barras en %d corridas",
            len(windows), summary.total_bars, len(profiles)
        )
        return summary

    def summarize_zoclo_profiles(self, windows: Sequence, stock_length: float = None) -> PackageSummary:
        """
        Resumen por perfil de zócalo con nombre, en orden de aparición

        Solo cuentan las ventanas con ``zoclo_config``.
        """
        if stock_length is None:
            stock_length = settings.DEFAULT_STOCK_LENGTH

        windows = list(windows)
        names: List[str] = []
        for window in windows:
            config = _field(window, "zoclo_config")
            if config is None:
                continue
            for name in (_field(config, "upper"), _field(config, "lower")):
                if name and name not in names and ProfileFamily.for_profile_name(name):
                    names.append(name)

        profiles = []
        for name in names:
            result = self.aggregate_profile(name, windows, stock_length)
            if result.metadata["input_pieces"]:
                profiles.append(self._summary_row(result, ProfileFamily.for_profile_name(name), None, name))

        return PackageSummary(
            stock_length=float(stock_length),
            windows_total=len(windows),
            profiles=profiles,
        )

    @staticmethod
    def _summary_row(
        result: CuttingResult,
        family: ProfileFamily,
        position: Optional[ZocloPosition],
        profile_name: Optional[str] = None,
    ) -> ProfileSummary:
        total_length = round(result.total_cut_length, 2)
        return ProfileSummary(
            family=family,
            position_filter=position,
            profile_name=profile_name,
            piece_count=result.metadata["input_pieces"],
            total_length=total_length,
            total_meters=total_length / 100,
            pieces_needed=result.pieces_needed,
            naive_bars=result.metadata["naive_bars"],
            bars_saved=result.metadata["naive_bars"] - result.pieces_needed,
            remainders=result.remainders,
        )

    @staticmethod
    def _parse_family(family) -> ProfileFamily:
        try:
            return ProfileFamily(family)
        except ValueError:
            raise InvalidParametersError(f"Familia de perfil desconocida: {family!r}") from None

    @staticmethod
    def _parse_position(position_filter) -> Optional[ZocloPosition]:
        if not position_filter:
            return None
        try:
            return ZocloPosition(position_filter)
        except ValueError:
            raise InvalidParametersError(f"Posición de zócalo desconocida: {position_filter!r}") from None


def calculate_profile_optimization(
    family,
    windows: Sequence,
    stock_length: float = None,
    position_filter=None,
    fit_policy=None,
) -> CuttingResult:
    """Atajo: agrega y optimiza una familia con un agregador nuevo"""
    return ProfileAggregator(fit_policy).aggregate(family, windows, stock_length, position_filter)
