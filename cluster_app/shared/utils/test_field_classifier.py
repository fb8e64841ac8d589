import unittest

from cluster_app.shared.utils.field_classifier import (
    HeuristicFieldClassifier,
    SchemaError,
    SchemaFieldClassifier,
    classify_fields,
    display_labels,
)
from cluster_app.shared.utils.values import (
    MISSING,
    EmptyDatasetError,
    Number,
    Text,
    parse_date,
    to_value,
)


class TestValues(unittest.TestCase):
    def test_numbers(self) -> None:
        self.assertEqual(to_value("12.5"), Number(12.5))
        self.assertEqual(to_value(" 7 "), Number(7.0))
        self.assertEqual(to_value("-3"), Number(-3.0))
        self.assertEqual(to_value("1e3"), Number(1000.0))
        self.assertEqual(to_value(".5"), Number(0.5))
        self.assertEqual(to_value(3), Number(3.0))
        self.assertEqual(to_value(2.25), Number(2.25))

    def test_non_numbers(self) -> None:
        for raw in ("inf", "nan", "12abc", "1_000", "1,000", "abc"):
            self.assertIsInstance(to_value(raw), Text, raw)
        self.assertIsInstance(to_value(True), Text)

    def test_missing(self) -> None:
        self.assertIs(to_value(None), MISSING)
        self.assertIs(to_value(""), MISSING)
        self.assertIs(to_value("   "), MISSING)
        self.assertIs(to_value(float("nan")), MISSING)

    def test_parse_date(self) -> None:
        ts = parse_date(Text("2024-03-15"))
        self.assertIsNotNone(ts)
        self.assertEqual((ts.year, ts.month), (2024, 3))
        self.assertIsNone(parse_date(Text("not a date")))
        self.assertIsNone(parse_date(Number(5.0)))
        self.assertIsNone(parse_date(MISSING))

    def test_parse_date_needs_year_and_month(self) -> None:
        for text, expected in [
            ("2024-03-15T10:30:00", (2024, 3)),
            ("3/15/2024", (2024, 3)),
            ("Mar 15, 2024", (2024, 3)),
            ("15 March 2024", (2024, 3)),
            ("March 2024", (2024, 3)),
        ]:
            ts = parse_date(Text(text))
            self.assertIsNotNone(ts, text)
            self.assertEqual((ts.year, ts.month), expected, text)
        for text in ("14:05", "May", "10am", "2024", "Tuesday"):
            self.assertIsNone(parse_date(Text(text)), text)


class TestHeuristicClassifier(unittest.TestCase):
    def setUp(self) -> None:
        self.rows = [
            {
                "customer_id": f"CUST{i:04d}",
                "Email Address": f"c{i}@example.com",
                "total_spent": str(100 + i),
                "order_value": str(10 * i),
                "signup_date": "2024-01-0" + str(1 + i % 9),
                "Last Login Time": "2024-02-01",
                "age": str(20 + i),
                "city": "Chicago",
            }
            for i in range(5)
        ]

    def test_roles(self) -> None:
        c = classify_fields(self.rows)
        self.assertEqual(c.identifier_field, "Email Address")
        self.assertEqual(c.monetary_fields, ("total_spent", "order_value"))
        self.assertEqual(c.primary_monetary_field, "total_spent")
        self.assertEqual(c.temporal_fields, ("signup_date", "Last Login Time"))
        self.assertEqual(c.primary_temporal_field, "signup_date")
        self.assertEqual(c.numeric_fields, ("total_spent", "order_value", "age"))
        self.assertEqual(c.monetary_feature_index, 0)

    def test_identifier_defaults_to_first_column(self) -> None:
        rows = [{"user_ref": "u1", "revenue": "10"}]
        c = classify_fields(rows)
        self.assertEqual(c.identifier_field, "user_ref")
        self.assertEqual(c.monetary_fields, ("revenue",))

    def test_created_matches_temporal(self) -> None:
        c = classify_fields([{"id": "1", "created_at": "2024-01-01"}])
        self.assertEqual(c.temporal_fields, ("created_at",))

    def test_numeric_detection_uses_sample_only(self) -> None:
        rows = [{"id": str(i), "score": ""} for i in range(150)]
        rows[120]["score"] = "9"
        self.assertNotIn("score", classify_fields(rows).numeric_fields)
        self.assertIn("score", HeuristicFieldClassifier(sample_rows=150).classify(rows).numeric_fields)

    def test_single_parseable_value_makes_column_numeric(self) -> None:
        rows = [{"x": "n/a"}, {"x": "oops"}, {"x": "4.5"}]
        self.assertEqual(classify_fields(rows).numeric_fields, ("x",))

    def test_empty_dataset_is_rejected(self) -> None:
        with self.assertRaises(EmptyDatasetError):
            classify_fields([])

    def test_display_labels(self) -> None:
        c = classify_fields([{"customer_name": "a", "revenue": "1"}])
        self.assertEqual(
            display_labels(c),
            {"customers": "Total Customers", "revenue": "Total Revenue", "avg_order": "Avg Revenue"},
        )
        c = classify_fields([{"contact": "a", "order_amount": "1"}])
        self.assertEqual(
            display_labels(c),
            {"customers": "Total Contacts", "revenue": "Total Amount", "avg_order": "Avg Order Value"},
        )
        c = classify_fields([{"name": "a"}])
        self.assertEqual(
            display_labels(c),
            {"customers": "Total Records", "revenue": "Total Value", "avg_order": "Avg Value"},
        )


class TestSchemaClassifier(unittest.TestCase):
    def test_declared_roles(self) -> None:
        rows = [{"id": "1", "spend": "10", "joined": "2024-01-01", "visits": "3"}]
        c = SchemaFieldClassifier(
            identifier_field="id",
            monetary_fields=["spend"],
            temporal_fields=["joined"],
            numeric_fields=["spend", "visits"],
        ).classify(rows)
        self.assertEqual(c.identifier_field, "id")
        self.assertEqual(c.monetary_fields, ("spend",))
        self.assertEqual(c.numeric_fields, ("spend", "visits"))

    def test_unknown_column_is_rejected(self) -> None:
        with self.assertRaises(SchemaError):
            SchemaFieldClassifier(monetary_fields=["missing"]).classify([{"a": "1"}])


if __name__ == "__main__":
    unittest.main()
