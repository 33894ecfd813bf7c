import unittest

from album_match.engine import Reconciler, best_strategy
from album_match.models import ConfidenceLevel, LocalTrack, MatchStrategy, Pair, RemoteTrack
from album_match.selection import StrategyReport, build_report, choose, rank_reports


def _report(strategy: MatchStrategy, average: float, high: int = 0, medium: int = 0, low: int = 0) -> StrategyReport:
    return StrategyReport(strategy=strategy, average=average, high=high, medium=medium, low=low)


class TestRanking(unittest.TestCase):
    def test_highest_average_wins(self) -> None:
        reports = [
            _report(MatchStrategy.ORDER, 60.0, high=2),
            _report(MatchStrategy.TITLE, 80.0, high=5),
        ]
        self.assertIs(choose(reports).strategy, MatchStrategy.TITLE)

    def test_tie_broken_by_high_count(self) -> None:
        reports = [
            _report(MatchStrategy.NAME, 70.0, high=2, low=0),
            _report(MatchStrategy.HYBRID, 70.0, high=3, low=1),
        ]
        self.assertIs(choose(reports).strategy, MatchStrategy.HYBRID)

    def test_tie_broken_by_fewest_low(self) -> None:
        reports = [
            _report(MatchStrategy.DURATION, 70.0, high=3, low=2),
            _report(MatchStrategy.FILESYSTEM, 70.0, high=3, low=1),
        ]
        self.assertIs(choose(reports).strategy, MatchStrategy.FILESYSTEM)

    def test_full_ties_keep_input_order(self) -> None:
        reports = [_report(strategy, 0.0) for strategy in MatchStrategy.automatic()]
        ranked = rank_reports(reports)
        self.assertEqual([r.strategy for r in ranked], MatchStrategy.automatic())

    def test_choose_requires_reports(self) -> None:
        with self.assertRaises(ValueError):
            choose([])


class TestBuildReport(unittest.TestCase):
    def test_averages_only_matched_pairs(self) -> None:
        local = [LocalTrack(file_path=f"/x/{i}.flac") for i in range(4)]
        remote = [RemoteTrack(id=str(i)) for i in range(4)]
        pairs = [
            Pair(local=local[0], remote=remote[0], confidence=90.0, level=ConfidenceLevel.HIGH),
            Pair(local=local[1], remote=remote[1], confidence=50.0, level=ConfidenceLevel.MEDIUM),
            Pair(local=local[2], remote=remote[2], confidence=10.0, level=ConfidenceLevel.LOW),
            Pair(local=local[3]),
            Pair(remote=remote[3]),
        ]
        report = build_report(MatchStrategy.ORDER, pairs)
        self.assertAlmostEqual(report.average, 50.0)
        self.assertEqual((report.high, report.medium, report.low), (1, 1, 1))
        self.assertEqual(report.matched, 3)
        self.assertIs(report.pairs, pairs)

    def test_no_matched_pairs_average_zero(self) -> None:
        report = build_report(MatchStrategy.ORDER, [Pair(local=LocalTrack(file_path="/x/a.flac"))])
        self.assertEqual(report.average, 0.0)
        self.assertEqual(report.matched, 0)


class TestBestStrategy(unittest.TestCase):
    def test_empty_inputs_return_stable_default(self) -> None:
        selection = Reconciler().best_strategy([], [])
        self.assertIs(selection.strategy, MatchStrategy.ORDER)
        self.assertEqual(selection.pairs, [])
        self.assertEqual(len(selection.reports), len(MatchStrategy.automatic()))
        self.assertTrue(all(report.average == 0.0 for report in selection.reports))

    def test_manual_is_never_considered(self) -> None:
        selection = Reconciler().best_strategy([], [])
        self.assertNotIn(MatchStrategy.MANUAL, [report.strategy for report in selection.reports])

    def test_shuffled_files_prefer_content_strategy(self) -> None:
        local = [
            LocalTrack(file_path="/album/a.flac", title="Gigue", duration_ms=180000),
            LocalTrack(file_path="/album/b.flac", title="Allemande", duration_ms=300000),
            LocalTrack(file_path="/album/c.flac", title="Courante", duration_ms=150000),
        ]
        remote = [
            RemoteTrack(id="1", name="Allemande", track_number=1, duration_ms=301000),
            RemoteTrack(id="2", name="Courante", track_number=2, duration_ms=149000),
            RemoteTrack(id="3", name="Gigue", track_number=3, duration_ms=181000),
        ]
        selection = Reconciler().best_strategy(local, remote)
        self.assertNotIn(selection.strategy, (MatchStrategy.ORDER, MatchStrategy.FILESYSTEM))
        matched = {pair.remote.id: pair.local.file_path for pair in selection.pairs if pair.is_matched}
        self.assertEqual(matched, {"1": "/album/b.flac", "2": "/album/c.flac", "3": "/album/a.flac"})
        self.assertTrue(all(pair.level is ConfidenceLevel.HIGH for pair in selection.pairs))
        self.assertIs(best_strategy(local, remote), selection.strategy)


if __name__ == "__main__":
    unittest.main()
