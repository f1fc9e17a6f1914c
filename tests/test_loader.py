"""Tests for centroid file loading."""

import pytest

from pnpcontrol.core.exceptions import CentroidFileError, CentroidFileStatus
from pnpcontrol.placement.loader import load_centroid_file
from pnpcontrol.placement.models import OperationMode, PlacementItem


def component(designation="R1", feeder=2, **overrides):
    record = {
        "designation": designation,
        "footprint": "0805",
        "value": 100,
        "x": 10.0,
        "y": 20.0,
        "theta": 0.0,
        "feeder": feeder,
    }
    record.update(overrides)
    return record


class TestLoadCentroidFile:
    """Successful loads"""

    def test_load_manual(self, centroid_file):
        """Test a manual-mode file is read in order"""
        path = centroid_file(
            {
                "operation_mode": "manual",
                "components": [component("R1"), component("C4", feeder=7, x=1.5)],
            }
        )
        result = load_centroid_file(path)
        assert result.mode == OperationMode.MANUAL
        assert len(result.queue) == 2
        assert result.queue[0] == PlacementItem("R1", "0805", 100.0, 10.0, 20.0, 0.0, 2)
        assert result.queue[1].designation == "C4"
        assert result.queue[1].feeder == 7
        assert result.queue[1].x_target == 1.5

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("auto", OperationMode.AUTO),
            ("AUTO", OperationMode.AUTO),
            ("autonomous", OperationMode.AUTO),
            ("Manual", OperationMode.MANUAL),
            (1, OperationMode.AUTO),
            (0, OperationMode.MANUAL),
        ],
    )
    def test_operation_mode_spellings(self, centroid_file, raw, expected):
        """Test accepted operation mode encodings"""
        path = centroid_file({"operation_mode": raw, "components": []})
        assert load_centroid_file(path).mode == expected

    def test_numeric_footprint_coerced(self, centroid_file):
        """Test footprints written as bare numbers load as strings"""
        path = centroid_file({"components": [component(footprint=1206)]})
        assert load_centroid_file(path).queue[0].footprint == "1206"

    def test_defaults(self, centroid_file):
        """Test mode defaults to manual and optional fields default"""
        path = centroid_file(
            {"components": [{"designation": "U1", "x": 1, "y": 2, "feeder": 0}]}
        )
        result = load_centroid_file(path)
        assert result.mode == OperationMode.MANUAL
        item = result.queue[0]
        assert item.footprint == ""
        assert item.value == 0.0
        assert item.theta_target == 0.0

    def test_empty_component_list(self, centroid_file):
        """Test an empty placement list is valid"""
        path = centroid_file({"operation_mode": "auto", "components": []})
        result = load_centroid_file(path)
        assert len(result.queue) == 0

    def test_maximum_components_accepted(self, centroid_file):
        """Test exactly the component limit loads"""
        path = centroid_file(
            {"components": [component(f"R{i}", feeder=i % 10) for i in range(100)]}
        )
        assert len(load_centroid_file(path).queue) == 100


class TestCentroidFileErrors:
    """Failure codes"""

    def test_missing_file(self, tmp_path):
        """Test missing file reports NOT_PRESENT"""
        with pytest.raises(CentroidFileError) as exc_info:
            load_centroid_file(tmp_path / "missing.yaml")
        assert exc_info.value.code == CentroidFileStatus.NOT_PRESENT
        assert "error code 1" in str(exc_info.value)

    def test_malformed_yaml(self, tmp_path):
        """Test unparsable file reports UNREADABLE"""
        path = tmp_path / "broken.yaml"
        path.write_text("components: [unclosed\n  - : :\n")
        with pytest.raises(CentroidFileError) as exc_info:
            load_centroid_file(path)
        assert exc_info.value.code == CentroidFileStatus.UNREADABLE

    def test_not_a_mapping(self, tmp_path):
        """Test a bare list reports INVALID"""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(CentroidFileError) as exc_info:
            load_centroid_file(path)
        assert exc_info.value.code == CentroidFileStatus.INVALID

    @pytest.mark.parametrize(
        "record",
        [
            component(feeder=10),
            component(feeder=-1),
            component(x="left"),
            {"designation": "R1", "x": 1.0, "feeder": 2},
        ],
    )
    def test_invalid_component(self, centroid_file, record):
        """Test out-of-range or missing fields report INVALID"""
        path = centroid_file({"components": [record]})
        with pytest.raises(CentroidFileError) as exc_info:
            load_centroid_file(path)
        assert exc_info.value.code == CentroidFileStatus.INVALID

    def test_unknown_mode(self, centroid_file):
        """Test unknown operation mode reports INVALID"""
        path = centroid_file({"operation_mode": "turbo", "components": []})
        with pytest.raises(CentroidFileError) as exc_info:
            load_centroid_file(path)
        assert exc_info.value.code == CentroidFileStatus.INVALID

    def test_too_many_components(self, centroid_file):
        """Test more than the limit reports TOO_MANY_COMPONENTS"""
        path = centroid_file(
            {"components": [component(f"R{i}", feeder=i % 10) for i in range(101)]}
        )
        with pytest.raises(CentroidFileError) as exc_info:
            load_centroid_file(path)
        assert exc_info.value.code == CentroidFileStatus.TOO_MANY_COMPONENTS
