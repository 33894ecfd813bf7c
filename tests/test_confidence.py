import unittest

from album_match.catalog import CatalogExtractor, CatalogNumber
from album_match.confidence import ConfidenceEvaluator, confidence
from album_match.config import MatchSettings
from album_match.models import ConfidenceLevel, LocalTrack, RemoteTrack


def _local(title: str, duration_ms: int = 0) -> LocalTrack:
    return LocalTrack(file_path=f"/music/{title}.flac", title=title, duration_ms=duration_ms)


def _remote(name: str, duration_ms: int = 0) -> RemoteTrack:
    return RemoteTrack(id=name, name=name, duration_ms=duration_ms)


class TestCatalogExtractor(unittest.TestCase):
    def test_builtin_bwv_pattern(self) -> None:
        extractor = CatalogExtractor()
        self.assertEqual(extractor.extract("Prelude in C major, BWV 846"), CatalogNumber("BWV", "846"))
        self.assertEqual(extractor.extract("prelude bwv846"), CatalogNumber("BWV", "846"))
        self.assertEqual(extractor.extract("Fugue BWV. 0846"), CatalogNumber("BWV", "846"))
        self.assertIsNone(extractor.extract("Aria"))
        self.assertIsNone(extractor.extract(None))

    def test_same_catalog_requires_both_sides(self) -> None:
        extractor = CatalogExtractor()
        self.assertTrue(extractor.same_catalog("Allegro BWV 846", "Prelude BWV 846"))
        self.assertFalse(extractor.same_catalog("Allegro BWV 846", "Prelude BWV 847"))
        self.assertFalse(extractor.same_catalog("Allegro", "Prelude"))
        self.assertFalse(extractor.same_catalog("Allegro", "Prelude BWV 846"))

    def test_custom_patterns_are_tried_in_order(self) -> None:
        extractor = CatalogExtractor({"K": r"\bK\.?\s*(\d+)", "Op": r"\bOp\.?\s*(\d+)"})
        self.assertEqual(extractor.schemes, ["K", "Op"])
        self.assertEqual(extractor.extract("Sonata K. 331"), CatalogNumber("K", "331"))
        self.assertEqual(extractor.extract("Etude Op. 10"), CatalogNumber("Op", "10"))
        self.assertIsNone(extractor.extract("Prelude BWV 846"))
        self.assertEqual(str(CatalogNumber("K", "331")), "K 331")


class TestConfidenceEvaluator(unittest.TestCase):
    def test_exact_title_close_duration_is_high(self) -> None:
        result = confidence(_remote("Aria", 121000), _local("Aria", 120000))
        self.assertEqual(result.factors["title"], 50.0)
        self.assertAlmostEqual(result.factors["duration"], (1 - 1000 / 12100) * 20)
        self.assertEqual(result.factors["catalog"], 0.0)
        self.assertGreaterEqual(result.score, 65)
        self.assertEqual(result.level, ConfidenceLevel.HIGH)

    def test_catalog_match_lifts_divergent_titles(self) -> None:
        result = confidence(_remote("Prelude BWV 846"), _local("Allegro BWV 846"))
        self.assertEqual(result.factors["catalog"], 30.0)
        self.assertEqual(result.factors["duration"], 0.0)
        self.assertAlmostEqual(result.score, 50 / 3 + 30)
        self.assertIn(result.level, (ConfidenceLevel.MEDIUM, ConfidenceLevel.HIGH))

    def test_unknown_durations_add_nothing(self) -> None:
        result = confidence(_remote("Aria"), _local("Aria"))
        self.assertEqual(result.factors["duration"], 0.0)
        self.assertEqual(result.score, 50.0)
        self.assertEqual(result.level, ConfidenceLevel.MEDIUM)

    def test_unrelated_tracks_are_low(self) -> None:
        result = confidence(_remote("Prelude", 100000), _local("Allegro", 300000))
        self.assertEqual(result.score, 0.0)
        self.assertEqual(result.level, ConfidenceLevel.LOW)

    def test_monotonic_in_title_similarity(self) -> None:
        remote = _remote("alpha beta gamma delta", 200000)
        titles = [
            "alpha xray yankee zulu",
            "alpha beta yankee zulu",
            "alpha beta gamma zulu",
            "alpha beta gamma delta",
        ]
        scores = [confidence(remote, _local(title, 190000)).score for title in titles]
        self.assertEqual(scores, sorted(scores))
        self.assertLess(scores[0], scores[-1])

    def test_level_thresholds(self) -> None:
        evaluator = ConfidenceEvaluator()
        self.assertEqual(evaluator.classify(44.99), ConfidenceLevel.LOW)
        self.assertEqual(evaluator.classify(45.0), ConfidenceLevel.MEDIUM)
        self.assertEqual(evaluator.classify(64.99), ConfidenceLevel.MEDIUM)
        self.assertEqual(evaluator.classify(65.0), ConfidenceLevel.HIGH)

    def test_configured_catalog_patterns(self) -> None:
        settings = MatchSettings(catalog_patterns={"K": r"\bK\.?\s*(\d+)"})
        evaluator = ConfidenceEvaluator(settings)
        result = evaluator.evaluate(_remote("Sonata K. 331"), _local("Rondo alla turca K331"))
        self.assertEqual(result.factors["catalog"], 30.0)

    def test_score_stays_within_bounds(self) -> None:
        result = confidence(_remote("Prelude BWV 846", 60000), _local("Prelude BWV 846", 60000))
        self.assertEqual(result.score, 100.0)


if __name__ == "__main__":
    unittest.main()
