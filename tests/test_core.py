"""
Tests for core types, the boundary box and reports.
"""

import json
import pytest
import numpy as np

from pipes_lib.core import (
    Point3D,
    Direction3D,
    ColorRGB,
    FORWARD,
    Segment,
    TurnMarker,
    BoxDomain,
    FinishReason,
    ErrorCode,
    PipeReport,
)


class TestTypes:
    def test_direction_is_normalized(self):
        d = Direction3D(0.0, 3.0, 0.0)
        assert d.to_tuple() == (0.0, 1.0, 0.0)

    def test_zero_direction_raises(self):
        with pytest.raises(ValueError):
            Direction3D(0.0, 0.0, 0.0)

    def test_offset(self):
        p = Point3D(1.0, 2.0, 3.0).offset(Direction3D(-1.0, 0.0, 0.0), 4.0)
        assert p == Point3D(-3.0, 2.0, 3.0)

    def test_forward_is_plus_z(self):
        assert FORWARD.to_tuple() == (0.0, 0.0, 1.0)
        assert FORWARD.negated().dot(FORWARD) == -1.0

    def test_color_channels_are_checked(self):
        with pytest.raises(ValueError):
            ColorRGB(1.2, 0.0, 0.0)

    def test_near_black(self):
        assert ColorRGB(0.1, 0.1, 0.19).is_near_black()
        assert not ColorRGB(0.1, 0.25, 0.1).is_near_black()

    def test_color_hex(self):
        assert ColorRGB(1.0, 0.5, 0.0).to_hex() == "#ff8000"
        assert ColorRGB(1.0, 0.5, 0.0).to_rgba8() == (255, 128, 0, 255)


class TestPieces:
    def test_segment_measures(self):
        seg = Segment(0, Point3D(0, 0, 0), Point3D(0, 6, 0), 0.5, ColorRGB(1, 1, 1))

        assert seg.length() == pytest.approx(6.0)
        assert seg.direction().to_tuple() == (0.0, 1.0, 0.0)
        assert seg.midpoint() == Point3D(0, 3, 0)
        assert seg.contains(np.array([0.4, 5.0, 0.0]))
        assert not seg.contains(np.array([0.6, 5.0, 0.0]))
        assert seg.contains(np.array([0.6, 5.0, 0.0]), margin=0.2)

    def test_marker_contains(self):
        marker = TurnMarker(0, Point3D(1, 1, 1), 0.7, ColorRGB(1, 1, 1))

        assert marker.contains(np.array([1.0, 1.0, 1.6]))
        assert not marker.contains(np.array([1.0, 1.0, 1.8]))

    def test_pieces_serialize_to_json(self):
        seg = Segment(2, Point3D(0, 0, 0), Point3D(3, 0, 0), 0.5, ColorRGB(0.5, 0.5, 1))
        marker = TurnMarker(2, Point3D(3, 0, 0), 0.7, ColorRGB(0.5, 0.5, 1))

        data = json.loads(json.dumps([seg.to_dict(), marker.to_dict()]))
        assert data[0]["kind"] == "segment"
        assert data[1]["center"] == {"x": 3, "y": 0, "z": 0}


class TestBoxDomain:
    def test_from_extents_is_centred(self):
        box = BoxDomain.from_extents((60.0, 30.0, 60.0))

        assert box.get_bounds() == (-30.0, 30.0, -15.0, 15.0, -30.0, 30.0)
        assert box.size == (60.0, 30.0, 60.0)

    def test_faces_count_as_inside(self):
        box = BoxDomain.from_extents((10.0, 10.0, 10.0))

        assert box.contains(Point3D(5.0, -5.0, 0.0))
        assert not box.contains(Point3D(5.0001, 0.0, 0.0))

    @pytest.mark.parametrize("size", [(0.0, 1.0, 1.0), (1.0, -2.0, 1.0)])
    def test_non_positive_extent_raises(self, size):
        with pytest.raises(ValueError):
            BoxDomain.from_extents(size)

    def test_inverted_bounds_raise(self):
        with pytest.raises(ValueError):
            BoxDomain(1.0, 0.0, 0.0, 1.0, 0.0, 1.0)

    def test_sample_points_inside(self):
        box = BoxDomain.from_extents((4.0, 2.0, 8.0))
        points = box.sample_points(200, seed=0)

        assert points.shape == (200, 3)
        assert all(box.contains(Point3D.from_array(p)) for p in points)

    def test_dict_round_trip(self):
        box = BoxDomain.from_extents((6.0, 4.0, 2.0))
        assert BoxDomain.from_dict(box.to_dict()) == box


class TestPipeReport:
    def test_warning_codes(self):
        report = PipeReport(pipe_id=1, reason=FinishReason.ENCLOSED, turn_count=3,
                            segment_count=0, max_turns=10)
        report.add_warning("boxed in", ErrorCode.ENCLOSED)
        report.add_warning("note")

        assert report.warnings == ["boxed in", "note"]
        assert report.error_codes == ["ENCLOSED"]
        assert not report.is_success()

    def test_dict_round_trip(self):
        report = PipeReport(pipe_id=4, reason=FinishReason.COMPLETED, turn_count=7,
                            segment_count=20, max_turns=7, metadata={"color": "#ffffff"})

        restored = PipeReport.from_dict(json.loads(json.dumps(report.to_dict())))
        assert restored == report
        assert restored.is_success()
