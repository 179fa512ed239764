"""
Utilidades de visualización y reportes de Alucut
"""

import json
import logging
from typing import List, Optional
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
import numpy as np
import pandas as pd

from .models import CuttingResult, ProfileCut

logger = logging.getLogger(__name__)


class CuttingVisualizer:
    """Visualización de los cortes por barra"""

    def __init__(self, result: CuttingResult):
        """
        Inicializa el visualizador

        Args:
            result: Resultado de la optimización
        """
        self.result = result
        self.colors = matplotlib.colormaps["Set3"](np.linspace(0, 1, 12))

    def plot_bars(self, save_path: Optional[str] = None, show: bool = False) -> None:
        """Dibuja una franja por barra nueva con sus piezas y el sobrante final"""
        if not self.result.detailed_cuts:
            logger.info("Ningún corte para visualizar")
            return

        bars = self.result.detailed_cuts
        fig, axes = plt.subplots(len(bars), 1, figsize=(12, 1.6 * len(bars)), squeeze=False)

        for ax, profile in zip(axes[:, 0], bars):
            stock = self.result.stock_length
            ax.set_xlim(0, stock)
            ax.set_ylim(-0.5, 0.5)
            ax.set_yticks([])
            ax.set_title(f"Barra #{profile.profile_number}", fontsize=9, loc="left")

            position = 0.0
            for j, trace in enumerate(profile.cuts):
                piece = trace.piece
                ax.add_patch(Rectangle((position, -0.3), piece.length, 0.6,
                                       facecolor=self.colors[j % len(self.colors)],
                                       edgecolor="black", linewidth=1))
                ax.text(position + piece.length / 2, 0, f"{piece.length:g}",
                        ha="center", va="center", fontsize=7)
                position += piece.length

            if position < stock:
                ax.add_patch(Rectangle((position, -0.3), stock - position, 0.6,
                                       facecolor="white", edgecolor="red", hatch="//", linewidth=1))

        axes[-1, 0].set_xlabel("Posición (cm)")
        plt.tight_layout()
        self._finish(fig, save_path, show)

    def create_summary_chart(self, save_path: Optional[str] = None, show: bool = False) -> None:
        """Gráfico de piezas por barra y distribución de sobrantes"""
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 4))

        numbers = [profile.profile_number for profile in self.result.detailed_cuts]
        used = [profile.used_length for profile in self.result.detailed_cuts]
        ax1.bar(numbers, used, color="skyblue", edgecolor="navy")
        ax1.axhline(self.result.stock_length, color="red", linestyle="--", linewidth=1)
        ax1.set_title("Longitud usada por barra")
        ax1.set_xlabel("Barra")
        ax1.set_ylabel("cm")

        if self.result.remainders:
            ax2.hist(self.result.remainders, bins=min(10, len(self.result.remainders)),
                     color="lightgreen", edgecolor="darkgreen")
        ax2.set_title(f"Sobrantes ({len(self.result.remainders)})")
        ax2.set_xlabel("cm")

        plt.tight_layout()
        self._finish(fig, save_path, show)

    @staticmethod
    def _finish(fig, save_path: Optional[str], show: bool) -> None:
        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches="tight")
        if show:
            plt.show()
        plt.close(fig)


class CuttingReporter:
    """Generación de reportes de una optimización"""

    def __init__(self, result: CuttingResult):
        self.result = result

    @property
    def title(self) -> str:
        family = self.result.metadata.get("family")
        position = self.result.metadata.get("position_filter")
        if self.result.metadata.get("profile_name"):
            return self.result.metadata["profile_name"]
        if family and position:
            return f"{family} {position}"
        return family or "Perfil"

    def generate_text_report(self) -> str:
        """Genera el reporte en texto plano"""
        result = self.result
        report = []
        report.append("=" * 60)
        report.append(f"OPTIMIZACIÓN DE CORTE - {self.title}")
        report.append("=" * 60)
        report.append("")

        report.append("RESUMEN:")
        report.append(f"  • Longitud de barra: {result.stock_length:g} cm")
        report.append(f"  • Barras nuevas: {result.pieces_needed}")
        report.append(f"  • Piezas de barra nueva: {len(result.cuts.from_new_profile)}")
        report.append(f"  • Piezas de sobrante: {len(result.cuts.from_remainders)}")
        report.append(f"  • Aprovechamiento: {result.efficiency:.1f}%")
        report.append(f"  • Política de sobrantes: {result.fit_policy.value}")
        if "naive_bars" in result.metadata:
            report.append(f"  • Cálculo simple: {result.metadata['naive_bars']} barras")

        if result.metadata.get("error"):
            report.append(f"  • Error: {result.metadata['error']}")

        report.append("")
        report.append("CORTES POR BARRA:")
        report.append("-" * 40)
        for profile in result.detailed_cuts:
            report.append(f"\nBarra #{profile.profile_number}:")
            for j, trace in enumerate(profile.cuts, 1):
                report.append(
                    f"  {j}. {trace.piece.length:g}cm {trace.piece.piece_type} "
                    f"[{trace.piece.source_tag}] -> queda {trace.remainder_after_cut:g}cm"
                )

        if result.remainders:
            report.append("\nSOBRANTES FINALES:")
            report.append("-" * 30)
            report.append("  " + ", ".join(f"{r:g}cm" for r in result.remainders))

        skipped = result.metadata.get("windows_skipped") or []
        if skipped:
            report.append("\nVENTANAS DESCARTADAS:")
            for item in skipped:
                report.append(f"  • #{item['index']}: {item['reason']}")

        report.append("\n" + "=" * 60)
        return "\n".join(report)

    def cuts_dataframe(self) -> pd.DataFrame:
        """Una fila por pieza cortada, en orden de barra"""
        rows = []
        for profile in self.result.detailed_cuts:
            for order, trace in enumerate(profile.cuts, 1):
                rows.append({
                    "Barra": profile.profile_number,
                    "Orden": order,
                    "Pieza": trace.piece.piece_type,
                    "Ventana": trace.piece.source_tag,
                    "Longitud": trace.piece.length,
                    "Origen": "barra nueva" if order == 1 else "sobrante",
                    "Sobrante_Tras_Corte": trace.remainder_after_cut,
                })
        return pd.DataFrame(rows, columns=[
            "Barra", "Orden", "Pieza", "Ventana", "Longitud", "Origen", "Sobrante_Tras_Corte"
        ])

    def generate_csv_report(self, file_path: str) -> List[str]:
        """Genera <base>_cortes.csv y <base>_sobrantes.csv"""
        cuts_path = f"{file_path}_cortes.csv"
        remainders_path = f"{file_path}_sobrantes.csv"

        self.cuts_dataframe().to_csv(cuts_path, index=False, encoding="utf-8")
        pd.DataFrame({"Sobrante": self.result.remainders}).to_csv(
            remainders_path, index=False, encoding="utf-8"
        )
        return [cuts_path, remainders_path]

    def generate_json_report(self, file_path: str) -> None:
        """Genera el reporte en JSON"""
        report_data = self.result.model_dump(mode="json")
        report_data["efficiency"] = self.result.efficiency

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(report_data, f, indent=2, ensure_ascii=False, default=str)

    def generate_html_report(self, file_path: str) -> str:
        """Genera el reporte en HTML y lo devuelve"""
        result = self.result
        html = f"""<!DOCTYPE html>
<html lang="es">
<head>
    <meta charset="UTF-8">
    <title>Optimización de corte - {self.title}</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 20px; }}
        .header {{ background-color: #2c3e50; color: white; padding: 20px; text-align: center; }}
        .summary {{ background-color: #ecf0f1; padding: 15px; margin: 20px 0; border-radius: 5px; }}
        .bar {{ background-color: #f8f9fa; padding: 10px; margin: 10px 0; border-left: 4px solid #3498db; }}
        .metric {{ display: inline-block; margin: 10px; padding: 10px; background-color: white; border-radius: 5px; }}
        .metric-value {{ font-size: 24px; font-weight: bold; color: #2c3e50; }}
        .metric-label {{ font-size: 12px; color: #7f8c8d; }}
        .remainders {{ background-color: #e8f5e8; padding: 15px; margin: 20px 0; border-radius: 5px; }}
    </style>
</head>
<body>
    <div class="header"><h1>Optimización de corte - {self.title}</h1></div>
    <div class="summary">
        <div class="metric"><div class="metric-value">{result.pieces_needed}</div>
            <div class="metric-label">Barras nuevas de {result.stock_length:g}cm</div></div>
        <div class="metric"><div class="metric-value">{result.efficiency:.1f}%</div>
            <div class="metric-label">Aprovechamiento</div></div>
        <div class="metric"><div class="metric-value">{len(result.cuts.from_remainders)}</div>
            <div class="metric-label">Piezas de sobrante</div></div>
    </div>
"""
        for profile in result.detailed_cuts:
            html += self._html_bar(profile)

        if result.remainders:
            html += '    <div class="remainders"><h2>Sobrantes finales</h2><p>'
            html += ", ".join(f"{r:g}cm" for r in result.remainders)
            html += "</p></div>\n"

        html += f"""    <p style="text-align: center; color: #7f8c8d;">Generado el {pd.Timestamp.now().strftime("%d/%m/%Y %H:%M:%S")}</p>
</body>
</html>
"""
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(html)
        return html

    @staticmethod
    def _html_bar(profile: ProfileCut) -> str:
        items = "".join(
            f"<li>{trace.piece.length:g}cm {trace.piece.piece_type} ({trace.piece.source_tag}) "
            f"- queda {trace.remainder_after_cut:g}cm</li>"
            for trace in profile.cuts
        )
        return f'    <div class="bar"><h3>Barra #{profile.profile_number}</h3><ol>{items}</ol></div>\n'


def export_result(result: CuttingResult, output_dir: str, formats: List[str] = None) -> None:
    """
    Exporta el resultado en varios formatos

    Args:
        result: Resultado de la optimización
        output_dir: Directorio de salida
        formats: Lista de formatos (txt, csv, json, html)
    """
    if formats is None:
        formats = ["txt", "csv", "json", "html"]

    Path(output_dir).mkdir(parents=True, exist_ok=True)

    reporter = CuttingReporter(result)
    base_name = "reporte_" + reporter.title.lower().replace(" ", "_")
    base_path = Path(output_dir) / base_name

    if "txt" in formats:
        with open(f"{base_path}.txt", "w", encoding="utf-8") as f:
            f.write(reporter.generate_text_report())

    if "csv" in formats:
        reporter.generate_csv_report(str(base_path))

    if "json" in formats:
        reporter.generate_json_report(f"{base_path}.json")

    if "html" in formats:
        reporter.generate_html_report(f"{base_path}.html")

    logger.info("Reportes exportados en %s", output_dir)


def create_visualization(result: CuttingResult, output_dir: str, show: bool = False) -> None:
    """Crea los gráficos del resultado en output_dir"""
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    visualizer = CuttingVisualizer(result)
    title = CuttingReporter(result).title.lower().replace(" ", "_")
    base_path = Path(output_dir) / f"visualizacion_{title}"

    visualizer.plot_bars(f"{base_path}_barras.png", show=show)
    visualizer.create_summary_chart(f"{base_path}_resumen.png", show=show)
