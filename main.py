"""
Servidor FastAPI principal para Alucut
"""

from dataclasses import asdict
from typing import List
import tempfile
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from alucut import __version__, settings
from alucut.aggregator import ProfileAggregator
from alucut.core import CuttingOptimizer
from alucut.exceptions import InvalidMeasurementError, InvalidParametersError, UnknownFormulaError
from alucut.formulas import FORMULAS
from alucut.models import (
    AggregationRequest, CutPiece, CuttingResult, OptimizationRequest,
    PackageRequest, PackageSummary, PieceRequest
)
from alucut.pieces import build_pieces
from alucut.utils import CuttingReporter

app = FastAPI(
    title="Alucut API",
    description="API de optimización de corte de perfiles para ventanas de aluminio",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Página inicial de la API"""
    return {
        "message": "Alucut API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health")
async def health_check():
    """Verificación de salud de la API"""
    return {
        "status": "healthy",
        "service": "Alucut API",
        "version": __version__
    }


@app.post("/optimize", response_model=CuttingResult)
async def optimize(request: OptimizationRequest):
    """
    Optimiza una lista de piezas sobre barras de stock

    Args:
        request: Piezas, longitud de barra y política de sobrantes

    Returns:
        Resultado de la optimización
    """
    try:
        return CuttingOptimizer(request.fit_policy).optimize(request.pieces, request.stock_length)
    except InvalidParametersError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/pieces", response_model=List[CutPiece])
async def pieces(request: PieceRequest):
    """Despiece de una ventana, todas las familias o solo la indicada"""
    try:
        by_family = build_pieces(
            request.window_type, request.line, request.width, request.height,
            request.window_id, request.family
        )
    except (UnknownFormulaError, InvalidMeasurementError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    return [piece for family_pieces in by_family.values() for piece in family_pieces]


@app.post("/aggregate", response_model=CuttingResult)
async def aggregate(request: AggregationRequest):
    """
    Optimiza una familia de perfil para un paquete de ventanas

    Las ventanas con medidas o tipo inválidos se descartan sin fallar.
    """
    try:
        return ProfileAggregator(request.fit_policy).aggregate(
            request.family, request.windows, request.stock_length, request.position_filter
        )
    except InvalidParametersError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/package/summary", response_model=PackageSummary)
async def package_summary(request: PackageRequest):
    """Barras necesarias por familia para todo el paquete"""
    try:
        return ProfileAggregator(request.fit_policy).summarize_package(
            request.windows, request.stock_length
        )
    except InvalidParametersError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/package/zoclo-profiles", response_model=PackageSummary)
async def zoclo_profiles(request: PackageRequest):
    """Barras por perfil de zócalo con nombre, juntando superiores e inferiores"""
    try:
        return ProfileAggregator(request.fit_policy).summarize_zoclo_profiles(
            request.windows, request.stock_length
        )
    except InvalidParametersError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/formulas")
async def get_formulas():
    """Tabla de descuentos por tipo de ventana y línea"""
    return [
        {"window_type": window_type.value, "line": line.value, **asdict(formula)}
        for (window_type, line), formula in FORMULAS.items()
    ]


@app.post("/report/generate")
async def generate_report(result: CuttingResult, format: str = "all"):
    """
    Genera reportes de un resultado en distintos formatos

    Args:
        result: Resultado de la optimización
        format: txt, csv, json, html o all
    """
    formats = ["txt", "csv", "json", "html"] if format == "all" else [format]
    unknown = set(formats) - {"txt", "csv", "json", "html"}
    if unknown:
        raise HTTPException(status_code=400, detail=f"Formato no soportado: {', '.join(sorted(unknown))}")

    reporter = CuttingReporter(result)
    results = {}

    with tempfile.TemporaryDirectory() as temp_dir:
        if "txt" in formats:
            results["txt"] = reporter.generate_text_report()

        if "json" in formats:
            results["json"] = result.model_dump(mode="json")

        if "csv" in formats:
            csv_data = {}
            for csv_path in reporter.generate_csv_report(str(Path(temp_dir) / "reporte")):
                csv_data[Path(csv_path).stem] = Path(csv_path).read_text(encoding="utf-8")
            results["csv"] = csv_data

        if "html" in formats:
            results["html"] = reporter.generate_html_report(str(Path(temp_dir) / "reporte.html"))

    return {
        "formats_generated": formats,
        "results": results
    }


@app.get("/examples/package")
async def get_package_example():
    """Ejemplo de petición para /package/summary"""
    return {
        "windows": [
            {"type": "Doble Corrediza", "line": "L3", "width": "200", "height": "150",
             "zoclo_config": {"upper": "ZOCLO 1V_L3", "lower": "CABEZAL_L3"}},
            {"type": "Fija Corrediza", "line": "L3", "width": "150", "height": "120"},
            {"type": "4 Corredizas", "line": "L3", "width": "320", "height": "180"},
            {"type": "Doble Corrediza", "line": "Línea 2", "width": "120", "height": "100"}
        ],
        "stock_length": 600,
        "fit_policy": "best_fit"
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
