"""
Unit Tests for appliance-type rules
"""
from types import SimpleNamespace

import pytest

from labops.core.appliance_rules import (
    TIE_BAR_SUPERSTRUCTURE,
    format_appliance_type,
    item_requires_cementation,
    requires_cementation,
)


class TestRequiresCementation:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "upper,lower,expected",
        [
            (TIE_BAR_SUPERSTRUCTURE, None, True),
            (None, TIE_BAR_SUPERSTRUCTURE, True),
            (TIE_BAR_SUPERSTRUCTURE, TIE_BAR_SUPERSTRUCTURE, True),
            ("full-arch-hybrid", "nightguard", False),
            (None, None, False),
        ],
    )
    def test_either_arch(self, upper, lower, expected):
        assert requires_cementation(upper, lower) is expected

    @pytest.mark.unit
    def test_display_label_does_not_match(self):
        assert requires_cementation("Ti Bar Superstructure", None) is False

    @pytest.mark.unit
    def test_item_helper(self):
        item = SimpleNamespace(upper_appliance_type=None, lower_appliance_type=TIE_BAR_SUPERSTRUCTURE)
        assert item_requires_cementation(item) is True
        assert item_requires_cementation(SimpleNamespace()) is False


class TestFormatApplianceType:

    @pytest.mark.unit
    def test_title_cases_slug(self):
        assert format_appliance_type(TIE_BAR_SUPERSTRUCTURE) == "Ti Bar Superstructure"

    @pytest.mark.unit
    def test_blank(self):
        assert format_appliance_type(None) == ""
