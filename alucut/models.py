"""
Modelos de datos para el motor de corte Alucut
"""

import math
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum

from . import settings


class WindowType(str, Enum):
    """Tipos de ventana corrediza soportados"""
    FIXED_SLIDING = "Fija Corrediza"
    DOUBLE_SLIDING = "Doble Corrediza"
    TWO_FIXED_TWO_SLIDING = "2 Fijos 2 Corredizos"
    FOUR_SLIDING = "4 Corredizas"


class Line(str, Enum):
    """Líneas de perfilería"""
    L2 = "L2"
    L3 = "L3"

    @classmethod
    def parse(cls, text: str) -> "Line":
        """Cualquier etiqueta que contenga "2" es línea 2; el resto es línea 3"""
        return cls.L2 if "2" in str(text) else cls.L3


class ProfileFamily(str, Enum):
    """Familias de perfil de aluminio"""
    JAMBA = "JAMBA"
    RIEL = "RIEL"
    RIEL_ADICIONAL = "RIEL ADICIONAL"
    CERCO = "CERCO"
    TRASLAPE = "TRASLAPE"
    ZOCLO = "ZOCLO"
    CABEZAL = "CABEZAL"

    @property
    def is_positional(self) -> bool:
        """Zócalos y cabezales se calculan por separado (superior / inferior)"""
        return self in (ProfileFamily.ZOCLO, ProfileFamily.CABEZAL)

    @classmethod
    def for_profile_name(cls, name: str) -> Optional["ProfileFamily"]:
        """Familia posicional de un perfil con nombre (CABEZAL_L3, ZOCLO 1V_L3...)"""
        upper = str(name or "").upper()
        for family in (cls.CABEZAL, cls.ZOCLO):
            if family.value in upper:
                return family
        return None


class ZocloPosition(str, Enum):
    """Posición de un zócalo dentro de la ventila"""
    SUPERIOR = "superior"
    INFERIOR = "inferior"


class FitPolicy(str, Enum):
    """Criterio para elegir sobrante cuando varios sirven"""
    FIRST_FIT = "first_fit"   # Primer sobrante en orden del pool
    BEST_FIT = "best_fit"     # Sobrante más corto que alcance


def _finite_positive(value: float, what: str) -> float:
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{what} debe ser finita y mayor que cero")
    return value


class CutPiece(BaseModel):
    """Una pieza de perfil que hay que cortar"""
    model_config = ConfigDict(frozen=True)

    length: float = Field(..., description="Longitud (cm)")
    source_tag: str = Field("", description="Ventana de origen")
    piece_type: str = Field("", description="Etiqueta de la pieza, ej. jamba_vertical_1")


class ZocloConfig(BaseModel):
    """Perfil elegido para el zócalo superior e inferior de una ventana"""
    upper: Optional[str] = Field(None, description="Perfil superior, ej. ZOCLO 1V_L3")
    lower: Optional[str] = Field(None, description="Perfil inferior, ej. CABEZAL_L3")


class WindowRecord(BaseModel):
    """Ventana cotizada tal como la entrega el gestor de paquetes"""
    type: str = Field(..., description="Tipo de ventana")
    line: str = Field(..., description="Línea (contiene L2 o L3)")
    width: str = Field(..., description="Ancho (cm), como texto")
    height: str = Field(..., description="Alto (cm), como texto")
    id: Optional[str] = Field(None, description="Identificador de la ventana")
    zoclo_config: Optional[ZocloConfig] = Field(
        None, description="Perfiles de zócalo; sin configuración lleva ZOCLO arriba y abajo"
    )

    @field_validator("width", "height", mode="before")
    @classmethod
    def coerce_measure(cls, v):
        # El front-end manda números o texto indistintamente
        if isinstance(v, (int, float)):
            return repr(v)
        return v


class CutTrace(BaseModel):
    """Un corte sobre una barra nueva o sobre un sobrante que desciende de ella"""
    piece: CutPiece
    remainder_after_cut: float = Field(..., description="Sobrante tras el corte (cm)")


class ProfileCut(BaseModel):
    """Secuencia de cortes de una barra nueva"""
    profile_number: int = Field(..., ge=1, description="Número de barra comprada")
    cuts: List[CutTrace] = Field(default_factory=list)

    @property
    def used_length(self) -> float:
        return sum(trace.piece.length for trace in self.cuts)


class CutsBreakdown(BaseModel):
    """Piezas agrupadas según su origen"""
    from_new_profile: List[CutPiece] = Field(default_factory=list)
    from_remainders: List[CutPiece] = Field(default_factory=list)
    new_profiles_required: int = Field(0, ge=0)


class CuttingResult(BaseModel):
    """Resultado de una optimización de corte"""
    pieces_needed: int = Field(0, ge=0, description="Barras nuevas a comprar")
    remainders: List[float] = Field(default_factory=list, description="Sobrantes finales (cm), de mayor a menor")
    cuts: CutsBreakdown = Field(default_factory=CutsBreakdown)
    detailed_cuts: List[ProfileCut] = Field(default_factory=list)
    stock_length: float = Field(settings.DEFAULT_STOCK_LENGTH, description="Longitud de barra (cm)")
    fit_policy: FitPolicy = Field(FitPolicy.BEST_FIT)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def total_cut_length(self) -> float:
        pieces = self.cuts.from_new_profile + self.cuts.from_remainders
        return sum(piece.length for piece in pieces)

    @property
    def total_remainder_length(self) -> float:
        return sum(self.remainders)

    @property
    def efficiency(self) -> float:
        """Porcentaje de la longitud comprada que termina en piezas"""
        purchased = self.pieces_needed * self.stock_length
        if purchased <= 0:
            return 0.0
        return (self.total_cut_length / purchased) * 100


class ProfileSummary(BaseModel):
    """Resumen de una familia de perfil dentro de un paquete"""
    family: ProfileFamily
    position_filter: Optional[ZocloPosition] = None
    profile_name: Optional[str] = Field(None, description="Perfil de zócalo con nombre")
    piece_count: int = Field(0, ge=0)
    total_length: float = Field(0, description="Suma de piezas (cm)")
    total_meters: float = Field(0, description="Suma de piezas (m)")
    pieces_needed: int = Field(0, ge=0)
    naive_bars: int = Field(0, ge=0, description="ceil(longitud total / barra)")
    bars_saved: int = Field(0, description="naive_bars - pieces_needed, puede ser negativo")
    remainders: List[float] = Field(default_factory=list)

    @property
    def label(self) -> str:
        if self.profile_name:
            return self.profile_name
        if self.position_filter:
            return f"{self.family.value} {self.position_filter.value}"
        return self.family.value


class PackageSummary(BaseModel):
    """Resumen de barras por familia para todo el paquete"""
    stock_length: float
    windows_total: int = Field(0, ge=0)
    profiles: List[ProfileSummary] = Field(default_factory=list)

    @property
    def total_bars(self) -> int:
        return sum(profile.pieces_needed for profile in self.profiles)


class OptimizationRequest(BaseModel):
    """Petición de optimización sobre una lista de piezas"""
    pieces: List[CutPiece] = Field(..., description="Piezas a cortar")
    stock_length: float = Field(settings.DEFAULT_STOCK_LENGTH, description="Longitud de barra (cm)")
    fit_policy: FitPolicy = Field(FitPolicy(settings.DEFAULT_FIT_POLICY))


class PieceRequest(BaseModel):
    """Petición de despiece de una ventana"""
    window_type: WindowType
    line: Line
    width: float = Field(..., description="Ancho (cm)")
    height: float = Field(..., description="Alto (cm)")
    window_id: str = Field("Ventana #1", description="Identificador de la ventana")
    family: Optional[ProfileFamily] = None

    @field_validator("width", "height")
    @classmethod
    def validate_measure(cls, v):
        return _finite_positive(v, "La medida")


class AggregationRequest(BaseModel):
    """Petición de optimización de una familia para un paquete de ventanas"""
    family: ProfileFamily
    windows: List[WindowRecord] = Field(default_factory=list)
    stock_length: float = Field(settings.DEFAULT_STOCK_LENGTH)
    position_filter: Optional[ZocloPosition] = None
    fit_policy: FitPolicy = Field(FitPolicy(settings.DEFAULT_FIT_POLICY))


class PackageRequest(BaseModel):
    """Petición de resumen de barras para un paquete completo"""
    windows: List[WindowRecord] = Field(default_factory=list)
    stock_length: float = Field(settings.DEFAULT_STOCK_LENGTH)
    fit_policy: FitPolicy = Field(FitPolicy(settings.DEFAULT_FIT_POLICY))
