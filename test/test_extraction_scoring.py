#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for depmap.extraction_scoring (metric combination and ranking)."""

from typing import Callable

import pytest

from depmap.cancellation import CancellationToken
from depmap.constants import OperationCancelledError, ValidationError
from depmap.extraction_scoring import (
    DifficultyCategory,
    ExtractionScore,
    calculate_extraction_scores,
    classify_difficulty,
    combine_scores,
    rank_extraction_candidates,
)
from depmap.graph_model import DependencyGraph
from depmap.metric_types import (
    ComplexityData,
    ComplexityMetric,
    CouplingMetric,
    ExternalApiMetric,
    Fallback,
    MetricKind,
    TechDebtMetric,
)
from depmap.scoring_config import ScoringWeights


def _metrics(coupling: float, complexity: float, tech_debt: float, external_api: float):
    return (
        CouplingMetric("/p.csproj", "P", 0, 0, 0, coupling),
        ComplexityMetric("/p.csproj", "P", 1, 1.0, complexity),
        TechDebtMetric("/p.csproj", "P", "net8.0", "net8.0", tech_debt),
        ExternalApiMetric("/p.csproj", "P", 0, external_api),
    )


def _score(name: str, final_score: float) -> ExtractionScore:
    _, complexity, tech_debt, api = _metrics(0.0, 0.0, 0.0, 0.0)
    return ExtractionScore(f"/src/{name}/{name}.csproj", name, final_score, None, complexity, tech_debt, api)


@pytest.mark.unit
class TestCombineScores:
    """Tests for combine_scores()."""

    def test_exact_weighted_sum(self) -> None:
        """0.4*80 + 0.3*50 + 0.2*40 + 0.1*100 = 65."""
        result = combine_scores(*_metrics(80.0, 50.0, 40.0, 100.0), ScoringWeights())
        assert result == pytest.approx(65.0)

    def test_missing_coupling_is_partial_sum(self) -> None:
        """Without coupling the other terms are summed as-is, weights are not redistributed."""
        _, complexity, tech_debt, api = _metrics(80.0, 50.0, 40.0, 100.0)
        assert combine_scores(None, complexity, tech_debt, api, ScoringWeights()) == pytest.approx(33.0)

    def test_result_within_bounds(self) -> None:
        assert combine_scores(*_metrics(100.0, 100.0, 100.0, 100.0), ScoringWeights()) == pytest.approx(100.0)
        assert combine_scores(*_metrics(0.0, 0.0, 0.0, 0.0), ScoringWeights()) == 0.0

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValidationError):
            combine_scores(*_metrics(1.0, 1.0, 1.0, 1.0), ScoringWeights(coupling=-0.1, complexity=0.5, tech_debt=0.5, external_exposure=0.1))

    def test_none_weights_rejected(self) -> None:
        with pytest.raises(ValidationError):
            combine_scores(*_metrics(1.0, 1.0, 1.0, 1.0), None)  # type: ignore[arg-type]


@pytest.mark.unit
class TestClassifyDifficulty:
    """Tests for the three difficulty tiers."""

    @pytest.mark.parametrize(
        "score,expected",
        [(0.0, DifficultyCategory.EASY), (33.0, DifficultyCategory.EASY), (33.5, DifficultyCategory.MEDIUM), (66.0, DifficultyCategory.MEDIUM), (66.1, DifficultyCategory.HARD), (100.0, DifficultyCategory.HARD)],
    )
    def test_tiers(self, score: float, expected: DifficultyCategory) -> None:
        assert classify_difficulty(score) is expected


@pytest.mark.unit
class TestCalculateExtractionScores:
    """Tests for calculate_extraction_scores()."""

    @pytest.fixture
    def inputs(self, path_of: Callable) -> dict:
        return {
            "complexity_data": {path_of("A"): ComplexityData(20, 7.0), path_of("B"): ComplexityData(5, 2.0)},
            "target_frameworks": {path_of("A"): "net472", path_of("B"): "net8.0", path_of("C"): "net8.0"},
            "endpoint_counts": {path_of("A"): 12, path_of("B"): 0, path_of("C"): 0},
        }

    def test_scores_every_project(self, abc_cycle_graph: DependencyGraph, inputs: dict) -> None:
        scores = {s.project_name: s for s in calculate_extraction_scores(abc_cycle_graph, **inputs)}

        assert set(scores) == {"A", "B", "C", "D"}
        # A: coupling 100, complexity 33, tech debt 40, api 66
        assert scores["A"].final_score == pytest.approx(0.4 * 100 + 0.3 * 33 + 0.2 * 40 + 0.1 * 66)
        assert scores["A"].difficulty_category is DifficultyCategory.MEDIUM
        assert scores["A"].fallback_metrics == []

    def test_fallbacks_are_reported(self, abc_cycle_graph: DependencyGraph, inputs: dict) -> None:
        scores = {s.project_name: s for s in calculate_extraction_scores(abc_cycle_graph, **inputs)}
        assert scores["C"].fallback_metrics == [MetricKind.COMPLEXITY]
        assert scores["D"].fallback_metrics == [MetricKind.COMPLEXITY, MetricKind.TECH_DEBT, MetricKind.EXTERNAL_API]
        # D: coupling 20, neutral complexity and tech debt, no exposure
        assert scores["D"].final_score == pytest.approx(0.4 * 20 + 0.3 * 50 + 0.2 * 50)

    def test_sorted_easiest_first(self, abc_cycle_graph: DependencyGraph, inputs: dict) -> None:
        scores = calculate_extraction_scores(abc_cycle_graph, **inputs)
        keys = [(s.final_score, s.project_path) for s in scores]
        assert keys == sorted(keys)

    def test_without_coupling(self, abc_cycle_graph: DependencyGraph, inputs: dict) -> None:
        scores = {s.project_name: s for s in calculate_extraction_scores(abc_cycle_graph, include_coupling=False, **inputs)}
        assert scores["A"].coupling_metric is None
        assert MetricKind.COUPLING in scores["A"].fallback_metrics
        assert scores["A"].final_score == pytest.approx(0.3 * 33 + 0.2 * 40 + 0.1 * 66)

    def test_threaded_matches_sequential(self, make_graph: Callable, path_of: Callable) -> None:
        """Worker count never changes the result."""
        spec = {f"P{i}": [f"P{(i * 7 + 3) % 40}", f"P{(i + 1) % 40}"] for i in range(40)}
        graph = make_graph(spec)
        complexity = {path_of(f"P{i}"): ComplexityData(i + 1, float(i % 30)) for i in range(40)}
        frameworks = {path_of(f"P{i}"): ["net48", "net6.0", "netstandard2.0", "net8.0"][i % 4] for i in range(40)}

        sequential = calculate_extraction_scores(graph, complexity, frameworks, max_workers=1)
        threaded = calculate_extraction_scores(graph, complexity, frameworks, max_workers=4)
        assert [(s.project_path, s.final_score) for s in sequential] == [(s.project_path, s.final_score) for s in threaded]

    def test_empty_graph(self) -> None:
        assert calculate_extraction_scores(DependencyGraph()) == []

    def test_invalid_arguments(self, abc_cycle_graph: DependencyGraph) -> None:
        with pytest.raises(ValidationError):
            calculate_extraction_scores(None)  # type: ignore[arg-type]
        with pytest.raises(ValidationError):
            calculate_extraction_scores(abc_cycle_graph, max_workers=0)
        with pytest.raises(ValidationError):
            calculate_extraction_scores(abc_cycle_graph, weights=ScoringWeights(coupling=-1.0))

    @pytest.mark.parametrize("workers", [1, 3])
    def test_cancellation(self, abc_cycle_graph: DependencyGraph, workers: int) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            calculate_extraction_scores(abc_cycle_graph, max_workers=workers, cancel_token=token)


@pytest.mark.unit
class TestRankExtractionCandidates:
    """Tests for rank_extraction_candidates()."""

    def test_shortlists_and_statistics(self) -> None:
        scores = [_score("Hard1", 90.0), _score("Easy1", 10.0), _score("Mid", 50.0), _score("Hard2", 70.0), _score("Easy2", 20.0)]
        ranked = rank_extraction_candidates(scores)

        assert [s.project_name for s in ranked.all_projects] == ["Easy1", "Easy2", "Mid", "Hard2", "Hard1"]
        assert [s.project_name for s in ranked.easiest_candidates] == ["Easy1", "Easy2"]
        assert [s.project_name for s in ranked.hardest_candidates] == ["Hard1", "Hard2"]
        assert (ranked.statistics.easy_count, ranked.statistics.medium_count, ranked.statistics.hard_count) == (2, 1, 2)
        assert ranked.statistics.average_score == pytest.approx(48.0)

    def test_limit(self) -> None:
        scores = [_score(f"E{i}", float(i)) for i in range(15)]
        ranked = rank_extraction_candidates(scores, limit=10)
        assert len(ranked.easiest_candidates) == 10
        assert ranked.easiest_candidates[0].project_name == "E0"
        assert ranked.hardest_candidates == []

    def test_empty(self) -> None:
        ranked = rank_extraction_candidates([])
        assert ranked.all_projects == []
        assert ranked.statistics.total_projects == 0

    def test_fallback_marker_in_record(self) -> None:
        metric = ComplexityMetric("/p.csproj", "P", 0, 0.0, 50.0, Fallback("complexity data unavailable"))
        assert metric.is_fallback
        assert str(metric.fallback) == "fallback: complexity data unavailable"
