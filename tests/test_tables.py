import io
import tempfile
import unittest
from pathlib import Path

import pandas as pd

from tests.fixtures import make_connections, make_locations, two_locations
from travelmap.errors import ValidationError
from travelmap.pipeline import DEFAULT_CONNECTIONS, DEFAULT_LOCATIONS
from travelmap.schemas import Location
from travelmap.tables import (
    ConnectionTable,
    LocationTable,
    check_references,
    load_connections,
    load_locations,
    weight_for_visits,
)


class LoadTablesTest(unittest.TestCase):
    def test_quoted_multi_word_names(self):
        text = io.StringIO(
            " 1   120.960515   23.69781  Taiwan\n"
            "10   174.885971  -40.90055  'New Zealand'\n"
        )
        table = load_locations(text)
        self.assertEqual([row.name for row in table], ["Taiwan", "New Zealand"])
        self.assertEqual(table.ids, [1, 10])
        self.assertAlmostEqual(table.coordinates()[10][1], -40.90055)

    def test_quoted_categories(self):
        text = io.StringIO(
            " 1  3 0.80 'Solo Trip(s) + Trip(s) with Family'\n"
            "22  3 0.60 'Trip(s) with Family'\n"
        )
        table = load_connections(text)
        self.assertEqual(len(table), 2)
        self.assertEqual(table.rows[0].category, "Solo Trip(s) + Trip(s) with Family")
        self.assertEqual(table.rows[1].from_id, 22)
        self.assertAlmostEqual(table.rows[0].weight, 0.8)

    def test_quoted_numeric_labels_stay_text(self):
        connections = load_connections(io.StringIO("1 2 0.6 '2023'\n"))
        self.assertEqual(connections.rows[0].category, "2023")
        locations = load_locations(io.StringIO("1 0 0 '1984'\n"))
        self.assertEqual(locations.rows[0].name, "1984")

    def test_csv_numeric_name(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "locations.csv"
            path.write_text("id,lon,lat,name\n7,12.5,41.9,1984\n", encoding="utf-8")
            table = load_locations(path)
        self.assertEqual(table.rows[0], Location(id=7, longitude=12.5, latitude=41.9, name="1984"))

    def test_categories_sorted(self):
        connections = load_connections(io.StringIO("1 2 0.6 solo\n2 1 0.9 family\n1 1 1.0 solo\n"))
        self.assertEqual(connections.categories, ["family", "solo"])

    def test_csv_with_header_aliases(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "locations.csv"
            path.write_text("id,lon,lat,name\n1,0,0,A\n2,10,10,B Land\n", encoding="utf-8")
            table = load_locations(path)
        self.assertEqual([row.name for row in table], ["A", "B Land"])

    def test_csv_missing_column(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "connections.csv"
            path.write_text("from,to,weight\n1,2,0.6\n", encoding="utf-8")
            with self.assertRaises(ValidationError) as ctx:
                load_connections(path)
        self.assertIn("category", str(ctx.exception))

    def test_bundled_data(self):
        locations = load_locations(DEFAULT_LOCATIONS)
        connections = load_connections(DEFAULT_CONNECTIONS)
        self.assertEqual(len(locations), 23)
        self.assertEqual(len(connections), 26)
        self.assertIn("New Zealand", [row.name for row in locations])
        self.assertEqual(
            connections.categories,
            ["Solo Trip(s)", "Solo Trip(s) + Trip(s) with Family", "Trip(s) with Family"],
        )
        check_references(locations, connections)


class RowValidationTest(unittest.TestCase):
    def test_latitude_out_of_range(self):
        df = pd.DataFrame([{"id": 1, "longitude": 0.0, "latitude": 95.0, "name": "North"}])
        with self.assertRaises(ValidationError) as ctx:
            LocationTable.from_frame(df)
        self.assertIn("row 1", str(ctx.exception))

    def test_non_positive_id(self):
        df = pd.DataFrame([{"id": 0, "longitude": 0.0, "latitude": 0.0, "name": "Zero"}])
        with self.assertRaises(ValidationError):
            LocationTable.from_frame(df)

    def test_weight_must_be_in_unit_interval(self):
        for weight in (0.0, 1.5):
            df = pd.DataFrame([{"from_id": 1, "to_id": 2, "weight": weight, "category": "solo"}])
            with self.assertRaises(ValidationError):
                ConnectionTable.from_frame(df)

    def test_blank_name(self):
        df = pd.DataFrame([{"id": 1, "longitude": 0.0, "latitude": 0.0, "name": "  "}])
        with self.assertRaises(ValidationError):
            LocationTable.from_frame(df)

    def test_duplicate_ids(self):
        with self.assertRaises(ValidationError) as ctx:
            make_locations((1, 0.0, 0.0, "A"), (1, 5.0, 5.0, "B"))
        self.assertIn("location id", str(ctx.exception))

    def test_duplicate_names(self):
        with self.assertRaises(ValidationError) as ctx:
            make_locations((1, 0.0, 0.0, "A"), (2, 5.0, 5.0, "A"))
        self.assertIn("location name", str(ctx.exception))

    def test_wrong_field_count(self):
        with self.assertRaises(ValidationError):
            load_connections(io.StringIO("1 2 0.6 solo\n3 4 0.6 solo extra\n"))

    def test_unquoted_multi_word_name_on_first_line(self):
        with self.assertRaises(ValidationError) as ctx:
            load_locations(io.StringIO("1 0 0 New Zealand\n2 1 1 B\n"))
        message = str(ctx.exception)
        self.assertIn("expected 4 fields", message)
        self.assertIn("found 5", message)


class ReferenceCheckTest(unittest.TestCase):
    def test_unknown_ids_are_named(self):
        connections = make_connections((1, 2, 0.6, "solo"), (1, 99, 0.6, "solo"), (42, 2, 0.6, "solo"))
        with self.assertRaises(ValidationError) as ctx:
            check_references(two_locations(), connections)
        message = str(ctx.exception)
        self.assertIn("row 2: to_id=99", message)
        self.assertIn("row 3: from_id=42", message)

    def test_valid_references(self):
        check_references(two_locations(), make_connections((2, 1, 0.6, "solo")))


class FrameTest(unittest.TestCase):
    def test_location_frame_round_trip(self):
        locations = two_locations()
        df = locations.to_frame()
        self.assertEqual(list(df.columns), ["id", "longitude", "latitude", "name"])
        self.assertEqual(LocationTable.from_frame(df), locations)

    def test_connection_category_is_categorical(self):
        df = make_connections((1, 2, 0.6, "solo"), (2, 1, 0.75, "family")).to_frame()
        self.assertIsInstance(df["category"].dtype, pd.CategoricalDtype)
        self.assertEqual(list(df["category"].cat.categories), ["family", "solo"])


class VisitWeightTest(unittest.TestCase):
    def test_lookup(self):
        self.assertEqual(
            [weight_for_visits(n) for n in range(1, 6)],
            [0.6, 0.75, 0.8, 0.9, 1.0],
        )

    def test_unknown_count(self):
        with self.assertRaises(ValidationError):
            weight_for_visits(6)


if __name__ == "__main__":
    unittest.main()
