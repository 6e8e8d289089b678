"""Tests for action matching and title-case normalisation."""

from __future__ import annotations

import pytest

from shapeval.naming import ActionType, is_matching_action, normalize_title_case


class TestNormalizeTitleCase:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("CATEGORY", "Category"),
            ("category", "Category"),
            ("sMTP", "Smtp"),
            ("x", "X"),
        ],
    )
    def test_normalises(self, raw: str, expected: str) -> None:
        assert normalize_title_case(raw) == expected

    def test_empty_and_none_pass_through(self) -> None:
        assert normalize_title_case("") == ""
        assert normalize_title_case(None) is None


class TestIsMatchingAction:
    def test_case_insensitive(self) -> None:
        assert is_matching_action("delete", ActionType.DELETE)
        assert is_matching_action("DeLeTe", ActionType.DELETE)

    def test_other_actions_do_not_match(self) -> None:
        assert not is_matching_action("INSERT", ActionType.DELETE)
        assert not is_matching_action("UPDATE", ActionType.DELETE)

    def test_blank_and_none(self) -> None:
        assert not is_matching_action(None, ActionType.DELETE)
        assert not is_matching_action("   ", ActionType.DELETE)

    def test_surrounding_whitespace_is_significant(self) -> None:
        assert not is_matching_action(" delete ", ActionType.DELETE)
