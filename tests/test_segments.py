import unittest

import pandas as pd

from tests.fixtures import make_connections, two_locations
from travelmap.errors import FatalAssertionError, ValidationError
from travelmap.schemas import Segment
from travelmap.services.segments import SEGMENT_COLUMNS, join_frames, join_segments


class JoinSegmentsTest(unittest.TestCase):
    def test_single_connection(self):
        segments = join_segments(two_locations(), make_connections((1, 2, 0.6, "solo")))
        self.assertEqual(
            list(segments),
            [Segment(from_id=1, to_id=2, weight=0.6, category="solo", x=0, y=0, xend=10, yend=10)],
        )

    def test_reciprocal_pair_keeps_both_rows(self):
        connections = make_connections((1, 2, 1.0, "solo"), (2, 1, 0.9, "family"))
        segments = join_segments(two_locations(), connections)
        self.assertEqual(len(segments), 2)
        second = segments.rows[1]
        self.assertEqual((second.x, second.y, second.xend, second.yend), (10, 10, 0, 0))
        self.assertEqual(second.category, "family")

    def test_self_loop_has_identical_endpoints(self):
        segments = join_segments(two_locations(), make_connections((2, 2, 0.6, "solo")))
        row = segments.rows[0]
        self.assertEqual((row.x, row.y), (row.xend, row.yend))

    def test_preserves_connection_order(self):
        connections = make_connections(
            (2, 1, 0.6, "a"), (1, 2, 0.75, "b"), (2, 2, 0.8, "c"), (1, 1, 0.9, "d"),
        )
        segments = join_segments(two_locations(), connections)
        self.assertEqual([s.category for s in segments], ["a", "b", "c", "d"])

    def test_unknown_location_produces_no_segments(self):
        with self.assertRaises(ValidationError):
            join_segments(two_locations(), make_connections((3, 1, 0.6, "solo")))

    def test_frame_columns(self):
        connections = make_connections((1, 2, 0.6, "solo"), (2, 1, 0.6, "family"))
        df = join_segments(two_locations(), connections).to_frame()
        self.assertEqual(list(df.columns), SEGMENT_COLUMNS)
        self.assertIsInstance(df["category"].dtype, pd.CategoricalDtype)
        self.assertEqual(list(df["category"].cat.categories), ["family", "solo"])


class JoinFramesTest(unittest.TestCase):
    def test_duplicate_location_ids_abort(self):
        locations_df = pd.DataFrame({
            "id": [1, 1, 2],
            "longitude": [0.0, 1.0, 10.0],
            "latitude": [0.0, 1.0, 10.0],
            "name": ["A", "A2", "B"],
        })
        connections_df = pd.DataFrame({
            "from_id": [1], "to_id": [2], "weight": [0.6], "category": ["solo"],
        })
        with self.assertRaises(FatalAssertionError) as ctx:
            join_frames(locations_df, connections_df)
        self.assertIn("2 rows for 1 connections", str(ctx.exception))

    def test_missing_location_aborts(self):
        locations_df = pd.DataFrame({"id": [1], "longitude": [0.0], "latitude": [0.0], "name": ["A"]})
        connections_df = pd.DataFrame({
            "from_id": [1, 1], "to_id": [1, 5], "weight": [0.6, 0.6], "category": ["solo", "solo"],
        })
        with self.assertRaises(FatalAssertionError):
            join_frames(locations_df, connections_df)

    def test_row_count_matches(self):
        locations_df = two_locations().to_frame()
        connections_df = make_connections(*[(1, 2, 0.6, "solo")] * 4).to_frame()
        segments = join_frames(locations_df, connections_df)
        self.assertEqual(len(segments), len(connections_df))


if __name__ == "__main__":
    unittest.main()
