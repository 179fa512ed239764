import json
import tempfile
import unittest
from pathlib import Path

import pandas as pd

from alucut.aggregator import ProfileAggregator
from alucut.models import WindowRecord
from alucut.utils import CuttingReporter, create_visualization, export_result


class TestReports(unittest.TestCase):
    def setUp(self):
        windows = [
            WindowRecord(type="Doble Corrediza", line="L3", width="200", height="150"),
            WindowRecord(type="4 Corredizas", line="L3", width="320", height="180"),
        ]
        self.result = ProfileAggregator().aggregate("JAMBA", windows, 600)
        self.reporter = CuttingReporter(self.result)
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)

    def test_text_report(self):
        report = self.reporter.generate_text_report()
        self.assertIn("OPTIMIZACIÓN DE CORTE - JAMBA", report)
        self.assertIn("Barra #1", report)
        self.assertIn("jamba_vertical_1", report)

    def test_cuts_dataframe(self):
        df = self.reporter.cuts_dataframe()
        self.assertEqual(len(df), 6)
        self.assertEqual(set(df["Origen"]), {"barra nueva", "sobrante"})
        self.assertEqual((df["Origen"] == "barra nueva").sum(), self.result.pieces_needed)

    def test_csv_report(self):
        base = str(Path(self.temp_dir.name) / "reporte")
        cuts_path, remainders_path = self.reporter.generate_csv_report(base)
        self.assertEqual(len(pd.read_csv(cuts_path)), 6)
        self.assertEqual(list(pd.read_csv(remainders_path)["Sobrante"]), self.result.remainders)

    def test_json_report(self):
        path = Path(self.temp_dir.name) / "reporte.json"
        self.reporter.generate_json_report(str(path))
        data = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(data["pieces_needed"], self.result.pieces_needed)
        self.assertIn("efficiency", data)

    def test_html_report(self):
        path = Path(self.temp_dir.name) / "reporte.html"
        html = self.reporter.generate_html_report(str(path))
        self.assertTrue(path.exists())
        self.assertIn("Barra #1", html)

    def test_export_and_visualization(self):
        export_result(self.result, self.temp_dir.name)
        create_visualization(self.result, self.temp_dir.name)
        names = {p.name for p in Path(self.temp_dir.name).iterdir()}
        self.assertIn("reporte_jamba.txt", names)
        self.assertIn("reporte_jamba_cortes.csv", names)
        self.assertIn("reporte_jamba.html", names)
        self.assertIn("visualizacion_jamba_barras.png", names)
        self.assertIn("visualizacion_jamba_resumen.png", names)

    def test_empty_result_has_no_bar_plot(self):
        empty = ProfileAggregator().aggregate("RIEL ADICIONAL", [], 600)
        create_visualization(empty, self.temp_dir.name)
        names = {p.name for p in Path(self.temp_dir.name).iterdir()}
        self.assertNotIn("visualizacion_riel_adicional_barras.png", names)
        self.assertIn("visualizacion_riel_adicional_resumen.png", names)


if __name__ == "__main__":
    unittest.main()
