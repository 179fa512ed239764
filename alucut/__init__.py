"""
Alucut - Optimización de corte de perfiles para ventanas de aluminio

Calcula cuántas barras de perfil hay que comprar para un paquete de ventanas
cotizadas, reutilizando los sobrantes entre piezas y entre ventanas sin unir
nunca dos sobrantes para una misma pieza.
"""

from .core import CuttingOptimizer, OffcutPool, optimize_cutting
from .aggregator import ProfileAggregator, calculate_profile_optimization
from .pieces import build_pieces, calculate_profile_pieces
from .exceptions import (
    AlucutError, InvalidMeasurementError, InvalidParametersError, UnknownFormulaError
)
from .models import (
    CutPiece, CuttingResult, FitPolicy, Line, PackageSummary, ProfileFamily,
    ProfileSummary, WindowRecord, WindowType, ZocloConfig, ZocloPosition
)

__version__ = "1.0.0"

__all__ = [
    "CuttingOptimizer",
    "OffcutPool",
    "optimize_cutting",
    "ProfileAggregator",
    "calculate_profile_optimization",
    "build_pieces",
    "calculate_profile_pieces",
    "AlucutError",
    "InvalidMeasurementError",
    "InvalidParametersError",
    "UnknownFormulaError",
    "CutPiece",
    "CuttingResult",
    "FitPolicy",
    "Line",
    "PackageSummary",
    "ProfileFamily",
    "ProfileSummary",
    "WindowRecord",
    "WindowType",
    "ZocloConfig",
    "ZocloPosition",
]
