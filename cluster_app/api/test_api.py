import unittest

from fastapi.testclient import TestClient

from cluster_app.api.app import app


class TestAnalysisApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.client = TestClient(app)

    def test_health(self) -> None:
        res = self.client.get("/health")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "healthy")

    def test_analyze_rows(self) -> None:
        rows = [{"email": f"c{i}@x.com", "total_amount": str(100 * (i % 4 + 1)), "order_date": f"2024-0{i % 9 + 1}-02"}
                for i in range(40)]
        res = self.client.post("/api/v1/analysis", json={"rows": rows, "random_seed": 1})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["success"])
        data = body["data"]
        self.assertEqual(len(data["records"]), 40)
        self.assertEqual(data["metrics"]["total_count"], 40)
        self.assertEqual(data["fields"]["primary_monetary_field"], "total_amount")
        self.assertFalse(data["metrics"]["trend_is_synthetic"])
        self.assertEqual(len(data["metrics"]["monthly_trend"]), 9)
        self.assertIn("### Executive Summary", body["insight"]["markdown"])
        self.assertEqual(body["insight"]["context"]["type"], "detailed")

    def test_empty_rows_rejected(self) -> None:
        res = self.client.post("/api/v1/analysis", json={"rows": []})
        self.assertEqual(res.status_code, 400)

    def test_bad_report_type(self) -> None:
        res = self.client.post("/api/v1/analysis", json={"rows": [{"a": "1"}], "report_type": "poem"})
        self.assertEqual(res.status_code, 400)

    def test_analyze_csv(self) -> None:
        csv_text = "name,email,revenue\nAnn,ann@x.com,10\nBob,bob@x.com,250\nCid,cid@x.com,30\n"
        res = self.client.post(
            "/api/v1/analysis/csv",
            json={"csv_text": csv_text, "filename": "customers.csv", "include_records": False, "random_seed": 2},
        )
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["filename"], "customers.csv")
        self.assertNotIn("records", body["data"])
        self.assertEqual(body["data"]["clustering"]["k"], 3)
        self.assertAlmostEqual(body["data"]["metrics"]["total_monetary_sum"], 290.0)

    def test_csv_without_rows_rejected(self) -> None:
        res = self.client.post("/api/v1/analysis/csv", json={"csv_text": "name,revenue\n"})
        self.assertEqual(res.status_code, 400)

    def test_sample(self) -> None:
        res = self.client.post("/api/v1/analysis/sample", json={"size": 50, "random_seed": 7, "report_type": "summary"})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["data"]["metrics"]["total_count"], 50)
        self.assertEqual(body["insight"]["report_type"], "summary")
        self.assertEqual(len(body["insight"]["messages"]), 2)


if __name__ == "__main__":
    unittest.main()
