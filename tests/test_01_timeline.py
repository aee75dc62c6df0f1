"""
Timeline model tests

Covers:
1. Clip trim bounds
2. Total duration bookkeeping
3. Playhead -> clip resolution
4. Text overlay lifecycle

Usage:
    uv run pytest tests/test_01_timeline.py -v -s
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from brandforge_editor.core.exceptions import (
    ClipNotFoundError,
    InvalidOverlayError,
    InvalidTrimError,
    OverlayNotFoundError,
)
from brandforge_editor.models.timeline import (
    Clip,
    ClipSelection,
    OverlaySelection,
    Selection,
    Timeline,
)


@pytest.fixture
def two_clip_timeline() -> Timeline:
    """10s clip trimmed to [2, 8] followed by an untouched 5s clip."""
    timeline = Timeline()
    first = timeline.append_clip(Clip.from_source("asset-a", 10.0))
    timeline.append_clip(Clip.from_source("asset-b", 5.0))
    timeline.set_trim(first.id, 2.0, 8.0)
    return timeline


class TestClip:
    """Clip model"""

    def test_from_source_is_untrimmed(self):
        clip = Clip.from_source("asset-a", 7.5)

        assert clip.trim_start == 0.0
        assert clip.trim_end == 7.5
        assert clip.clip_duration == 7.5
        assert clip.id

    def test_same_source_gets_distinct_ids(self):
        a = Clip.from_source("asset-a", 3.0)
        b = Clip.from_source("asset-a", 3.0)

        assert a.id != b.id
        assert a.source_asset_id == b.source_asset_id

    @pytest.mark.parametrize("start,end", [(5.0, 5.0), (6.0, 5.0), (-1.0, 2.0), (0.0, 11.0)])
    def test_invalid_trim_rejected_at_construction(self, start: float, end: float):
        with pytest.raises(ValidationError):
            Clip(source_asset_id="a", source_duration=10.0, trim_start=start, trim_end=end)


class TestTimelineDuration:
    """Total duration bookkeeping"""

    def test_empty_timeline(self):
        timeline = Timeline()

        assert timeline.total_duration == 0.0
        assert timeline.resolve(0.0) is None

    def test_scenario_total(self, two_clip_timeline: Timeline):
        assert two_clip_timeline.total_duration == pytest.approx(11.0)
        assert two_clip_timeline.clip_starts == pytest.approx([0.0, 6.0])

    def test_total_tracks_add_remove_trim(self):
        timeline = Timeline()
        clips = [timeline.append_clip(Clip.from_source(f"asset-{i}", d)) for i, d in enumerate([4.0, 2.5, 6.0])]
        assert timeline.total_duration == pytest.approx(12.5)

        timeline.set_trim(clips[2].id, 1.0, 3.0)
        assert timeline.total_duration == pytest.approx(8.5)

        timeline.remove_clip(clips[0].id)
        assert timeline.total_duration == pytest.approx(4.5)
        assert timeline.total_duration == pytest.approx(
            sum(c.trim_end - c.trim_start for c in timeline.clips)
        )

    def test_remove_unknown_clip_is_noop(self, two_clip_timeline: Timeline):
        revision = two_clip_timeline.revision

        assert two_clip_timeline.remove_clip("missing") is None
        assert len(two_clip_timeline.clips) == 2
        assert two_clip_timeline.revision == revision

    def test_mutations_bump_revision(self):
        timeline = Timeline()
        clip = timeline.append_clip(Clip.from_source("a", 2.0))
        r1 = timeline.revision
        timeline.set_trim(clip.id, 0.5, 1.5)

        assert timeline.revision > r1


class TestSetTrim:
    """Trim updates"""

    @pytest.mark.parametrize("start,end", [(5.0, 5.0), (6.0, 3.0), (-0.1, 4.0), (1.0, 10.5)])
    def test_invalid_trim_leaves_clip_unchanged(self, two_clip_timeline: Timeline, start: float, end: float):
        clip = two_clip_timeline.clips[0]

        with pytest.raises(InvalidTrimError):
            two_clip_timeline.set_trim(clip.id, start, end)

        assert (clip.trim_start, clip.trim_end) == (2.0, 8.0)
        assert two_clip_timeline.total_duration == pytest.approx(11.0)

    def test_trim_to_full_source_accepted(self, two_clip_timeline: Timeline):
        clip = two_clip_timeline.clips[0]
        two_clip_timeline.set_trim(clip.id, 0.0, 10.0)

        assert 0 <= clip.trim_start < clip.trim_end <= clip.source_duration
        assert two_clip_timeline.total_duration == pytest.approx(15.0)

    def test_unknown_clip(self, two_clip_timeline: Timeline):
        with pytest.raises(ClipNotFoundError):
            two_clip_timeline.set_trim("missing", 0.0, 1.0)


class TestResolve:
    """Playhead -> (clip, source offset)"""

    def test_scenario_points(self, two_clip_timeline: Timeline):
        first, second = two_clip_timeline.clips

        at3 = two_clip_timeline.resolve(3.0)
        assert at3.clip.id == first.id
        assert at3.offset == pytest.approx(5.0)

        at7 = two_clip_timeline.resolve(7.0)
        assert at7.clip.id == second.id
        assert at7.offset == pytest.approx(1.0)

    def test_boundary_belongs_to_next_clip(self, two_clip_timeline: Timeline):
        active = two_clip_timeline.resolve(6.0)

        assert active.index == 1
        assert active.offset == pytest.approx(0.0)

    def test_tail_freezes_on_last_trim_end(self, two_clip_timeline: Timeline):
        last = two_clip_timeline.clips[-1]

        for t in (11.0, 25.0):
            active = two_clip_timeline.resolve(t)
            assert active.clip.id == last.id
            assert active.offset == last.trim_end

    def test_offset_within_trim_everywhere(self):
        timeline = Timeline()
        for i, (duration, start, end) in enumerate([(4.0, 0.5, 3.25), (2.0, 0.0, 2.0), (9.0, 4.1, 8.7)]):
            clip = timeline.append_clip(Clip.from_source(f"a{i}", duration))
            timeline.set_trim(clip.id, start, end)

        steps = 400
        for k in range(steps):
            t = timeline.total_duration * k / steps
            active = timeline.resolve(t)
            matches = [
                c for c, s in zip(timeline.clips, timeline.clip_starts) if s <= t < s + c.clip_duration
            ]
            assert len(matches) == 1
            assert active.clip.id == matches[0].id
            assert active.clip.trim_start <= active.offset <= active.clip.trim_end


class TestOverlays:
    """Text overlay lifecycle"""

    def test_add_overlay_default_span(self, two_clip_timeline: Timeline):
        overlay = two_clip_timeline.add_overlay(2.0, text="Hello")

        assert overlay.start_time == 2.0
        assert overlay.end_time == 5.0

    def test_add_overlay_cut_at_timeline_end(self, two_clip_timeline: Timeline):
        overlay = two_clip_timeline.add_overlay(10.0)

        assert overlay.end_time == pytest.approx(11.0)

    @pytest.mark.parametrize("at_time", [11.0, 12.0, -1.0])
    def test_add_overlay_empty_range_rejected(self, two_clip_timeline: Timeline, at_time: float):
        with pytest.raises(InvalidOverlayError):
            two_clip_timeline.add_overlay(at_time)
        assert two_clip_timeline.overlays == []

    def test_trim_does_not_clamp_overlays(self, two_clip_timeline: Timeline):
        overlay = two_clip_timeline.add_overlay(2.0)
        first = two_clip_timeline.clips[0]

        two_clip_timeline.set_trim(first.id, 2.0, 3.0)

        assert two_clip_timeline.total_duration == pytest.approx(6.0)
        assert two_clip_timeline.get_overlay(overlay.id).end_time == 5.0

    def test_remove_clip_keeps_overlays(self, two_clip_timeline: Timeline):
        two_clip_timeline.add_overlay(7.0)
        two_clip_timeline.remove_clip(two_clip_timeline.clips[1].id)

        assert len(two_clip_timeline.overlays) == 1

    def test_active_window_is_half_open(self, two_clip_timeline: Timeline):
        overlay = two_clip_timeline.add_overlay(2.0)

        assert not overlay.is_active(1.999)
        assert overlay.is_active(2.0)
        assert overlay.is_active(4.999)
        assert not overlay.is_active(5.0)

    def test_active_overlays_in_insertion_order(self, two_clip_timeline: Timeline):
        a = two_clip_timeline.add_overlay(1.0, text="A")
        b = two_clip_timeline.add_overlay(0.5, text="B")
        two_clip_timeline.add_overlay(8.0, text="C")

        assert [o.id for o in two_clip_timeline.active_overlays(2.0)] == [a.id, b.id]

    def test_set_overlay_keeps_order(self, two_clip_timeline: Timeline):
        a = two_clip_timeline.add_overlay(1.0, text="A")
        b = two_clip_timeline.add_overlay(1.0, text="B")

        updated = two_clip_timeline.set_overlay(a.id, text="A2", color="#00ff00", position={"x": 0.1, "y": 0.9})

        assert updated.id == a.id
        assert updated.text == "A2"
        assert updated.position.x == 0.1
        assert [o.id for o in two_clip_timeline.overlays] == [a.id, b.id]

    @pytest.mark.parametrize(
        "fields",
        [
            {"start_time": 5.0, "end_time": 4.0},
            {"font_size_ratio": 0},
            {"position": {"x": 1.5, "y": 0.5}},
            {"unknown_field": 1},
            {"id": "other"},
        ],
    )
    def test_set_overlay_invalid(self, two_clip_timeline: Timeline, fields: dict):
        overlay = two_clip_timeline.add_overlay(1.0, text="A")

        with pytest.raises(InvalidOverlayError):
            two_clip_timeline.set_overlay(overlay.id, **fields)
        assert two_clip_timeline.get_overlay(overlay.id) == overlay

    def test_set_unknown_overlay(self, two_clip_timeline: Timeline):
        with pytest.raises(OverlayNotFoundError):
            two_clip_timeline.set_overlay("missing", text="x")

    def test_remove_overlay(self, two_clip_timeline: Timeline):
        overlay = two_clip_timeline.add_overlay(1.0)

        assert two_clip_timeline.remove_overlay(overlay.id) == overlay
        assert two_clip_timeline.remove_overlay(overlay.id) is None
        assert two_clip_timeline.overlays == []


class TestSnapshotAndSelection:
    def test_snapshot_is_detached(self, two_clip_timeline: Timeline):
        snapshot = two_clip_timeline.snapshot()
        two_clip_timeline.set_trim(two_clip_timeline.clips[0].id, 0.0, 1.0)
        two_clip_timeline.remove_clip(two_clip_timeline.clips[1].id)

        assert len(snapshot.clips) == 2
        assert snapshot.clips[0].trim_end == 8.0
        assert snapshot.total_duration == pytest.approx(11.0)

    def test_selection_is_tagged(self):
        adapter = TypeAdapter(Selection)

        assert adapter.validate_python({"kind": "clip", "clip_id": "c1"}) == ClipSelection(clip_id="c1")
        assert adapter.validate_python({"kind": "overlay", "overlay_id": "o1"}) == OverlaySelection(
            overlay_id="o1"
        )
        with pytest.raises(ValidationError):
            adapter.validate_python({"kind": "track", "id": "x"})
