"""
Tests for ConfidenceScore value object
"""
import pytest

from domain.value_objects import ConfidenceScore


class TestConfidenceScore:

    @pytest.mark.parametrize("raw,expected", [
        (85, 85),
        ("85", 85),
        ("85%", 85),
        ("92/100", 92),
        (77.6, 78),
        (150, 100),
        (-5, 0),
        ("high", 0),
        (None, 0),
        (float("nan"), 0),
        (True, 0),
    ])
    def test_from_raw(self, raw, expected):
        assert ConfidenceScore.from_raw(raw).value == expected

    @pytest.mark.parametrize("value,level", [(80, "High"), (79, "Medium"), (60, "Medium"), (59, "Low"), (0, "Low")])
    def test_level_thresholds(self, value, level):
        assert ConfidenceScore(value).level == level

    def test_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            ConfidenceScore(101)

    def test_rejects_non_int(self):
        with pytest.raises(TypeError):
            ConfidenceScore("50")

    def test_str(self):
        assert str(ConfidenceScore(70)) == "70%"
