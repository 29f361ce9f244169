"""Tests for the memoizing titles engine."""

from titlescope.models import Release
from titlescope.titles.engine import TitlesEngine, build_snapshot
from titlescope.titles.gaps import EpisodeGapAnalyzer


def _releases() -> list[Release]:
    return [
        Release(hash="a", title="Dune", type="movie", year=2021, resolution="2160p", source="bluray"),
        Release(
            hash="b",
            title="Dune",
            type="movie",
            year=2021,
            resolution="1080p",
            source="web",
            hdr=("DV",),
            codec=("x265",),
        ),
        Release(hash="c", title="Show", type="episode", season=1, episode=1, state="error"),
        Release(hash="d", title="Show", type="episode", season=1, episode=3),
    ]


class TestBuildSnapshot:
    """Tests for build_snapshot."""

    def test_pipeline(self) -> None:
        """Test every stage runs over the collection."""
        snapshot = build_snapshot(_releases())
        assert [g.title for g in snapshot.groups] == ["Dune", "Show"]
        assert snapshot.groups[0].best_member is not None
        assert snapshot.groups[0].best_member.hash == "a"
        assert [r.title for r in snapshot.recommendations] == ["Dune"]
        assert snapshot.gaps.total_missing == 1
        assert snapshot.analytics.total_count == 4
        assert snapshot.analytics.completion_rate == 75.0

    def test_deterministic(self) -> None:
        """Test equal input gives equal output."""
        first = build_snapshot(_releases())
        second = build_snapshot(_releases())
        assert first.groups == second.groups
        assert first.recommendations == second.recommendations
        assert first.gaps == second.gaps

    def test_empty(self) -> None:
        """Test an empty collection."""
        snapshot = build_snapshot([])
        assert snapshot.groups == ()
        assert snapshot.recommendations == ()
        assert snapshot.analytics.completion_rate == 0.0


class TestTitlesEngine:
    """Tests for TitlesEngine memoization."""

    def test_same_collection_not_rebuilt(self) -> None:
        """Test the snapshot is reused for the same collection object."""
        engine = TitlesEngine()
        releases = _releases()
        first = engine.snapshot(releases)
        second = engine.snapshot(releases)
        assert first is second
        assert engine.builds == 1

    def test_new_collection_rebuilt(self) -> None:
        """Test a new collection object triggers a rebuild, even if equal."""
        engine = TitlesEngine()
        engine.snapshot(_releases())
        engine.snapshot(_releases())
        assert engine.builds == 2

    def test_tolerance_change_rebuilds(self) -> None:
        """Test changing the tolerance invalidates the snapshot."""
        engine = TitlesEngine()
        releases = _releases()
        engine.snapshot(releases)
        engine.tolerance = 0
        snapshot = engine.snapshot(releases)
        assert engine.builds == 2
        # b ties a, so it is still within a zero tolerance
        assert [c.release.hash for c in snapshot.groups[0].upgrade_candidates] == ["b"]

    def test_expansion_does_not_rebuild(self) -> None:
        """Test row queries for new expansion states reuse the snapshot."""
        engine = TitlesEngine()
        releases = _releases()
        assert engine.row_count(releases, frozenset()) == 2
        assert engine.row_count(releases, frozenset({"Dune"})) == 3
        rows = list(engine.rows(releases, frozenset({"Dune", "Dune::2021"})))
        assert len(rows) == 5
        assert engine.builds == 1

    def test_invalidate(self) -> None:
        """Test invalidate forces a rebuild."""
        engine = TitlesEngine()
        releases = _releases()
        engine.snapshot(releases)
        engine.invalidate()
        engine.snapshot(releases)
        assert engine.builds == 2

    def test_gap_analyzer(self) -> None:
        """Test a custom gap analyzer is used."""
        engine = TitlesEngine(gap_analyzer=EpisodeGapAnalyzer(excluded_titles=["Show"]))
        assert engine.snapshot(_releases()).gaps.total_missing == 0
