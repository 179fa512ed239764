import unittest

from fastapi.testclient import TestClient

from main import app


class TestAPI(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_optimize(self):
        response = self.client.post("/optimize", json={
            "pieces": [{"length": 500}, {"length": 500}, {"length": 500}],
            "stock_length": 600,
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["pieces_needed"], 3)
        self.assertEqual(data["remainders"], [100, 100, 100])
        self.assertEqual(len(data["detailed_cuts"]), 3)

    def test_optimize_rejects_bad_stock_length(self):
        response = self.client.post("/optimize", json={"pieces": [{"length": 100}], "stock_length": 0})
        self.assertEqual(response.status_code, 400)

    def test_pieces(self):
        response = self.client.post("/pieces", json={
            "window_type": "Doble Corrediza", "line": "L3",
            "width": 200, "height": 150, "family": "ZOCLO",
        })
        self.assertEqual(response.status_code, 200)
        pieces = response.json()
        self.assertEqual(len(pieces), 4)
        self.assertEqual(pieces[0]["length"], 91)

    def test_pieces_unknown_formula(self):
        response = self.client.post("/pieces", json={
            "window_type": "4 Corredizas", "line": "L2", "width": 300, "height": 150,
        })
        self.assertEqual(response.status_code, 422)
        self.assertIn("4 Corredizas", response.json()["detail"])

    def test_aggregate(self):
        response = self.client.post("/aggregate", json={
            "family": "ZOCLO",
            "position_filter": "inferior",
            "windows": [
                {"type": "Doble Corrediza", "line": "L3", "width": "200", "height": "150"},
                {"type": "Doble Corrediza", "line": "L3", "width": "oops", "height": "150"},
            ],
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["pieces_needed"], 1)
        self.assertEqual(data["metadata"]["windows_used"], 1)
        self.assertEqual(len(data["metadata"]["windows_skipped"]), 1)

    def test_package_summary(self):
        example = self.client.get("/examples/package").json()
        response = self.client.post("/package/summary", json=example)
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["windows_total"], 4)
        self.assertEqual(data["profiles"][0]["family"], "JAMBA")

    def test_zoclo_profiles(self):
        example = self.client.get("/examples/package").json()
        response = self.client.post("/package/zoclo-profiles", json=example)
        self.assertEqual(response.status_code, 200)
        names = [profile["profile_name"] for profile in response.json()["profiles"]]
        self.assertEqual(names, ["ZOCLO 1V_L3", "CABEZAL_L3"])

    def test_package_summary_rejects_bad_stock_length(self):
        response = self.client.post("/package/summary", json={"windows": [], "stock_length": -1})
        self.assertEqual(response.status_code, 400)

    def test_formulas(self):
        response = self.client.get("/formulas")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 6)

    def test_report(self):
        result = self.client.post("/optimize", json={"pieces": [{"length": 400}, {"length": 200}]}).json()
        response = self.client.post("/report/generate?format=txt", json=result)
        self.assertEqual(response.status_code, 200)
        self.assertIn("Barra #1", response.json()["results"]["txt"])

        response = self.client.post("/report/generate?format=pdf", json=result)
        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":
    unittest.main()
