#!/usr/bin/env python3
"""
Script principal para ejecutar Alucut
"""

import sys
import logging
import argparse
from pathlib import Path

from alucut import ProfileAggregator, WindowRecord, ZocloConfig, settings
from alucut.aggregator import PACKAGE_RUNS
from alucut.utils import export_result, create_visualization


def create_sample_data():
    """Ventanas de ejemplo para la demostración"""
    return [
        WindowRecord(type="Doble Corrediza", line="L3", width="200", height="150",
                     zoclo_config=ZocloConfig(upper="ZOCLO 1V_L3", lower="CABEZAL_L3")),
        WindowRecord(type="Fija Corrediza", line="L3", width="150", height="120"),
        WindowRecord(type="4 Corredizas", line="L3", width="320", height="180"),
        WindowRecord(type="2 Fijos 2 Corredizos", line="L3", width="280", height="140",
                     zoclo_config=ZocloConfig(upper="CABEZAL_L3", lower="ZOCLO 2V_L3")),
        WindowRecord(type="Doble Corrediza", line="Línea 2", width="120", height="100"),
        WindowRecord(type="Doble Corrediza", line="L3", width="abc", height="150"),
    ]


def run_demo(export_dir=None, visualization=False):
    """Ejecuta la demostración del resumen de paquete"""

    print("🔧 Alucut - Demostración")
    print("=" * 60)

    windows = create_sample_data()
    aggregator = ProfileAggregator()

    print(f"✓ {len(windows)} ventanas cargadas")
    print(f"✓ Barra de stock: {settings.DEFAULT_STOCK_LENGTH:g}cm, política {aggregator.fit_policy.value}")

    print("\n🔄 Calculando resumen del paquete...")
    summary = aggregator.summarize_package(windows)

    print(f"\n{'Perfil':<22}{'Piezas':>8}{'Metros':>9}{'Barras':>8}{'Simple':>8}{'Ahorro':>8}")
    print("-" * 63)
    for profile in summary.profiles:
        print(f"{profile.label:<22}{profile.piece_count:>8}{profile.total_meters:>9.2f}"
              f"{profile.pieces_needed:>8}{profile.naive_bars:>8}{profile.bars_saved:>8}")
    print("-" * 63)
    print(f"📦 Total de barras: {summary.total_bars}")

    zoclo_summary = aggregator.summarize_zoclo_profiles(windows)
    if zoclo_summary.profiles:
        print("\n🔩 Zócalos por perfil (superior + inferior juntos):")
        for profile in zoclo_summary.profiles:
            print(f"  {profile.label:<20}{profile.piece_count:>4} piezas  {profile.pieces_needed:>3} barras")

    if export_dir:
        print(f"\n📁 Exportando resultados a: {export_dir}")
        for family, position in PACKAGE_RUNS:
            result = aggregator.aggregate(family, windows, position_filter=position)
            if not result.pieces_needed:
                continue
            export_result(result, export_dir)
            if visualization:
                create_visualization(result, export_dir)
        print("✅ Exportación completada")

    return summary


def run_api_server():
    """Inicia el servidor de la API"""

    print("🚀 Iniciando servidor de la API Alucut...")

    import uvicorn

    print(f"✓ Servidor en http://{settings.API_HOST}:{settings.API_PORT}")
    print(f"✓ Documentación: http://{settings.API_HOST}:{settings.API_PORT}/docs")
    print("\nPresione Ctrl+C para detener el servidor")

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )


def run_tests():
    """Ejecuta los tests"""

    print("🧪 Ejecutando tests de Alucut...")

    import unittest

    root = Path(__file__).parent
    loader = unittest.TestLoader()
    suite = loader.discover(str(root / "tests"), pattern="test_*.py", top_level_dir=str(root))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    if result.wasSuccessful():
        print("\n✅ Todos los tests pasaron")
        return True
    print(f"\n❌ {len(result.failures) + len(result.errors)} tests fallaron")
    return False


def main():
    """Función principal"""

    parser = argparse.ArgumentParser(
        description="Alucut - Optimización de corte de perfiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos de uso:
  python run.py demo                    # Ejecuta la demostración
  python run.py api                     # Inicia el servidor de la API
  python run.py test                    # Ejecuta los tests
  python run.py demo --export salida    # Demo y exporta reportes
        """
    )

    parser.add_argument(
        "command",
        choices=["demo", "api", "test"],
        help="Comando a ejecutar"
    )

    parser.add_argument(
        "--export",
        metavar="DIR",
        help="Directorio para exportar reportes"
    )

    parser.add_argument(
        "--visualization",
        action="store_true",
        help="Crear gráficos de los resultados"
    )

    args = parser.parse_args()
    logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)

    try:
        if args.command == "demo":
            run_demo(args.export, args.visualization)

        elif args.command == "api":
            run_api_server()

        elif args.command == "test":
            success = run_tests()
            sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n\n👋 Interrumpido por el usuario")


if __name__ == "__main__":
    main()
