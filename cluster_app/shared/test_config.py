import os
import unittest
from unittest import mock

from cluster_app.shared.config import AnalysisSettings


class TestAnalysisSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            s = AnalysisSettings.from_env()
        self.assertEqual(s.max_segments, 5)
        self.assertEqual(s.max_iter, 100)
        self.assertEqual(s.trend_months, 12)
        self.assertIsNone(s.random_seed)

    def test_env_overrides(self) -> None:
        env = {"CLUSTER_MAX_SEGMENTS": "3", "CLUSTER_RANDOM_SEED": "17", "CLUSTER_SAMPLE_SIZE": "40"}
        with mock.patch.dict(os.environ, env, clear=True):
            s = AnalysisSettings.from_env()
        self.assertEqual(s.max_segments, 3)
        self.assertEqual(s.random_seed, 17)
        self.assertEqual(s.sample_size, 40)

    def test_invalid_values_fall_back(self) -> None:
        env = {"CLUSTER_MAX_ITER": "lots", "CLUSTER_RANDOM_SEED": "abc", "CLUSTER_MAX_SEGMENTS": "0"}
        with mock.patch.dict(os.environ, env, clear=True):
            s = AnalysisSettings.from_env()
        self.assertEqual(s.max_iter, 100)
        self.assertIsNone(s.random_seed)
        self.assertEqual(s.max_segments, 1)

    def test_request_seed_wins(self) -> None:
        s = AnalysisSettings(random_seed=5)
        self.assertEqual(s.analysis_options().random_seed, 5)
        self.assertEqual(s.analysis_options(9).random_seed, 9)


if __name__ == "__main__":
    unittest.main()
