"""Unit tests for suggestion reconciliation against the taxonomy."""

from __future__ import annotations

from uuid import UUID

import pytest

from conftest import METRIC_FOLLOWERS, METRIC_SIGNUPS, PLATFORM_INSTAGRAM, PLATFORM_TIKTOK


def _raw(**overrides):
    item = {
        "title": "Grow signups",
        "description": "More trials",
        "category": "Growth",
        "priority": 1,
        "suggestedTargetValue": 1000,
        "suggestedTimeframe": "monthly",
        "confidenceScore": 0.9,
        "reasoning": "x",
    }
    item.update(overrides)
    return item


class TestResolveMetricType:
    def test_exact_code_match_is_case_insensitive(self, reference_context) -> None:
        from app.services.reconciler import resolve_metric_type

        assert resolve_metric_type("SIGNUPS", "Anything", reference_context.metric_types) == METRIC_SIGNUPS

    def test_description_matches_first_title_word(self, reference_context) -> None:
        from app.services.reconciler import resolve_metric_type

        # "new" appears in "New account registrations"
        result = resolve_metric_type("unknown_code", "New members per week", reference_context.metric_types)

        assert result == METRIC_SIGNUPS

    def test_exact_code_beats_description(self, reference_context) -> None:
        from app.services.reconciler import resolve_metric_type

        result = resolve_metric_type("followers", "New members", reference_context.metric_types)

        assert result == METRIC_FOLLOWERS

    def test_falls_back_to_first_entry(self, reference_context) -> None:
        from app.services.reconciler import resolve_metric_type

        assert resolve_metric_type(None, "Grow signups", reference_context.metric_types) == METRIC_FOLLOWERS

    def test_empty_taxonomy_is_unresolved(self) -> None:
        from app.services.reconciler import resolve_metric_type

        assert resolve_metric_type("followers", "Grow", []) is None


class TestResolvePlatforms:
    def test_substring_match_on_name_or_display_name(self, reference_context) -> None:
        from app.services.reconciler import resolve_platforms

        result = resolve_platforms(["Insta", "TIKTOK"], reference_context.platforms)

        assert result == [PLATFORM_INSTAGRAM, PLATFORM_TIKTOK]

    def test_unmatched_and_non_string_hints_dropped(self, reference_context) -> None:
        from app.services.reconciler import resolve_platforms

        result = resolve_platforms(["LinkedIn", 42, None, "", "instagram"], reference_context.platforms)

        assert result == [PLATFORM_INSTAGRAM]

    def test_duplicates_collapsed(self, reference_context) -> None:
        from app.services.reconciler import resolve_platforms

        result = resolve_platforms(["instagram", "Instagram"], reference_context.platforms)

        assert result == [PLATFORM_INSTAGRAM]

    @pytest.mark.parametrize("hints", [None, "instagram", {"name": "instagram"}])
    def test_non_list_hints_resolve_to_empty(self, reference_context, hints) -> None:
        from app.services.reconciler import resolve_platforms

        assert resolve_platforms(hints, reference_context.platforms) == []


class TestClamping:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(7, 3), (0, 1), (-4, 1), (2, 2), ("3", 3), (2.4, 2), (float("inf"), 3), (None, 2)],
    )
    def test_priority(self, raw, expected) -> None:
        from app.services.reconciler import clamp_priority

        assert clamp_priority(raw) == expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(1.5, 1.0), (-0.2, 0.0), (0.42, 0.42), ("0.5", 0.5), (None, 0.0)],
    )
    def test_confidence(self, raw, expected) -> None:
        from app.services.reconciler import clamp_confidence

        assert clamp_confidence(raw) == expected

    @pytest.mark.parametrize("raw", ["high", float("nan"), True, [1]])
    def test_unusable_numbers_rejected(self, raw) -> None:
        from app.services.reconciler import clamp_confidence, clamp_priority

        with pytest.raises(ValueError):
            clamp_priority(raw)
        with pytest.raises(ValueError):
            clamp_confidence(raw)


class TestReconcileSuggestion:
    def test_end_to_end_example_item(self, reference_context) -> None:
        from app.services.reconciler import reconcile_suggestion

        suggestion = reconcile_suggestion(_raw(), reference_context)

        assert suggestion.priority == 1
        assert suggestion.confidence_score == 0.9
        assert suggestion.metric_type_id == METRIC_FOLLOWERS
        assert suggestion.applicable_platforms == []
        assert suggestion.suggested_target_value == 1000.0
        assert isinstance(suggestion.id, UUID)

    def test_out_of_range_values_clamped(self, reference_context) -> None:
        from app.services.reconciler import reconcile_suggestion

        suggestion = reconcile_suggestion(_raw(priority=7, confidenceScore=1.5), reference_context)

        assert suggestion.priority == 3
        assert suggestion.confidence_score == 1.0

    def test_raw_identifier_never_reused(self, reference_context) -> None:
        from app.services.reconciler import reconcile_suggestion

        raw_id = "77777777-7777-4777-8777-777777777777"
        first = reconcile_suggestion(_raw(id=raw_id), reference_context)
        second = reconcile_suggestion(_raw(id=raw_id), reference_context)

        assert str(first.id) != raw_id
        assert first.id != second.id

    def test_empty_metric_taxonomy_leaves_metric_unresolved(self, reference_context) -> None:
        from app.services.reconciler import reconcile_suggestion

        context = reference_context.model_copy(update={"metric_types": []})
        suggestion = reconcile_suggestion(_raw(metricTypeId="followers"), context)

        assert suggestion.metric_type_id is None

    def test_defaults_for_missing_optional_fields(self, reference_context) -> None:
        from app.services.reconciler import reconcile_suggestion

        suggestion = reconcile_suggestion({"title": "Launch referral loop"}, reference_context)

        assert suggestion.category == "General"
        assert suggestion.priority == 2
        assert suggestion.confidence_score == 0.0
        assert suggestion.description == ""
        assert suggestion.reasoning == "AI-generated suggestion for general objectives"
        assert suggestion.suggested_target_value is None

    @pytest.mark.parametrize("target", ["a lot", float("inf"), True])
    def test_unusable_target_value_dropped(self, reference_context, target) -> None:
        from app.services.reconciler import reconcile_suggestion

        suggestion = reconcile_suggestion(_raw(suggestedTargetValue=target), reference_context)

        assert suggestion.suggested_target_value is None

    @pytest.mark.parametrize("raw", [{"description": "no title"}, {"title": "   "}, "just text", 3])
    def test_invalid_items_raise(self, reference_context, raw) -> None:
        from app.services.reconciler import reconcile_suggestion

        with pytest.raises(ValueError):
            reconcile_suggestion(raw, reference_context)


class TestReconcileSuggestions:
    def test_bad_items_skipped_order_preserved(self, reference_context) -> None:
        from app.services.reconciler import reconcile_suggestions

        raw_items = [
            _raw(title="First"),
            {"description": "missing title"},
            _raw(title="Second", priority="urgent"),
            "garbage",
            _raw(title="Third"),
        ]

        suggestions = reconcile_suggestions(raw_items, reference_context)

        assert [s.title for s in suggestions] == ["First", "Third"]

    @pytest.mark.parametrize("field", ["priority", "confidenceScore", "suggestedTargetValue"])
    def test_integer_too_large_for_float_isolated(self, reference_context, field) -> None:
        from app.services.extraction import parse_generation_output
        from app.services.reconciler import reconcile_suggestions

        huge = "1" + "0" * 400
        reply = (
            f'[{{"title": "Huge", "{field}": {huge}}}, '
            '{"title": "Normal", "priority": 2, "confidenceScore": 0.5}]'
        )

        suggestions = reconcile_suggestions(parse_generation_output(reply), reference_context)

        titles = [s.title for s in suggestions]
        assert titles[-1] == "Normal"
        if field == "suggestedTargetValue":
            assert titles == ["Huge", "Normal"]
            assert suggestions[0].suggested_target_value is None
        else:
            assert titles == ["Normal"]

    def test_every_reference_points_into_context(self, reference_context) -> None:
        from app.services.reconciler import reconcile_suggestions

        raw_items = [
            _raw(metricTypeId="nonsense", applicablePlatforms=["insta", "myspace"]),
            _raw(metricTypeId="signups", applicablePlatforms=["tik"]),
        ]
        metric_ids = {m.id for m in reference_context.metric_types}
        platform_ids = {p.id for p in reference_context.platforms}

        for suggestion in reconcile_suggestions(raw_items, reference_context):
            assert suggestion.metric_type_id in metric_ids
            assert set(suggestion.applicable_platforms) <= platform_ids


class TestOverallConfidence:
    def test_empty_is_exactly_zero(self) -> None:
        from app.services.reconciler import calculate_overall_confidence

        assert calculate_overall_confidence([]) == 0

    def test_mean_rounded_to_two_decimals(self, reference_context) -> None:
        from app.services.reconciler import calculate_overall_confidence, reconcile_suggestions

        suggestions = reconcile_suggestions(
            [_raw(confidenceScore=0.9), _raw(confidenceScore=0.8), _raw(confidenceScore=0.755)],
            reference_context,
        )

        assert calculate_overall_confidence(suggestions) == 0.82
