#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Integration tests for depmap.pipeline.run_analysis()."""

from typing import Callable, Dict, Tuple

import pytest

from depmap.cancellation import CancellationToken
from depmap.constants import OperationCancelledError, ValidationError
from depmap.dataset_loader import AnalysisInput
from depmap.extraction_scoring import DifficultyCategory
from depmap.graph_builder import SolutionDataset
from depmap.metric_types import ComplexityData
from depmap.pipeline import run_analysis
from depmap.scoring_config import ScoringConfig, ScoringWeights


@pytest.mark.integration
class TestRunAnalysis:
    """End-to-end runs over in-memory input."""

    @pytest.fixture
    def abc_input(self, make_solution: Callable, abc_call_counts: Dict[Tuple[str, str], int], path_of: Callable) -> AnalysisInput:
        return AnalysisInput(
            solutions=[make_solution("Main", {"A": ["B"], "B": ["C"], "C": ["A"], "D": ["A"]})],
            call_counts=abc_call_counts,
            complexity_data={path_of(name): ComplexityData(10, 3.0) for name in "ABCD"},
            target_frameworks={path_of(name): "net8.0" for name in "ABCD"},
            endpoint_counts={path_of(name): 0 for name in "ABCD"},
        )

    def test_empty_solution(self) -> None:
        """An empty solution yields zero everything and no exceptions."""
        results = run_analysis(AnalysisInput(solutions=[SolutionDataset("Empty")]))

        assert results.graph.vertex_count == 0
        assert results.cycles == []
        assert results.statistics.total_cycles == 0
        assert results.statistics.participation_rate == 0.0
        assert results.recommendations == []
        assert results.extraction_scores == []
        assert results.ranked_candidates is not None
        assert results.ranked_candidates.all_projects == []

    def test_abc_scenario(self, abc_input: AnalysisInput) -> None:
        results = run_analysis(abc_input)

        assert len(results.cycles) == 1
        assert results.statistics.total_projects_in_cycles == 3
        assert results.statistics.participation_rate == pytest.approx(75.0)

        top = results.recommendations[0]
        assert (top.rank, top.source.name, top.target.name, top.coupling_score) == (1, "B", "C", 2)

        assert len(results.extraction_scores) == 4
        by_name = {s.project_name: s for s in results.extraction_scores}
        # A is the most coupled project, D the least
        assert by_name["A"].final_score > by_name["D"].final_score
        assert all(s.fallback_metrics == [] for s in results.extraction_scores)
        assert results.ranked_candidates.statistics.total_projects == 4

    def test_cycles_only(self, abc_input: AnalysisInput) -> None:
        results = run_analysis(abc_input, include_extraction_scores=False)
        assert results.extraction_scores == []
        assert results.ranked_candidates is None
        assert len(results.recommendations) == 1

    def test_threaded_scoring_matches(self, abc_input: AnalysisInput) -> None:
        sequential = run_analysis(abc_input)
        threaded = run_analysis(abc_input, max_workers=3)
        assert [(s.project_path, s.final_score) for s in sequential.extraction_scores] == [
            (s.project_path, s.final_score) for s in threaded.extraction_scores
        ]

    def test_custom_weights(self, abc_input: AnalysisInput) -> None:
        config = ScoringConfig(weights=ScoringWeights(coupling=1.0, complexity=0.0, tech_debt=0.0, external_exposure=0.0))
        scores = {s.project_name: s for s in run_analysis(abc_input, config=config).extraction_scores}
        assert scores["A"].final_score == pytest.approx(100.0)
        assert scores["A"].difficulty_category is DifficultyCategory.HARD
        assert scores["D"].final_score == pytest.approx(20.0)

    def test_multi_solution_merge(self, make_solution: Callable) -> None:
        """A project shared by two solutions is one vertex; the cycle spans both solutions."""
        first = make_solution("Sol1", {"X": ["Y"], "Y": []})
        second = make_solution("Sol2", {"Y": ["Z"], "Z": ["X"], "X": []})
        results = run_analysis(AnalysisInput(solutions=[first, second]), include_extraction_scores=False)

        assert results.graph.vertex_count == 3
        assert len(results.cycles) == 1
        assert results.cycles[0].cycle_size == 3
        assert results.graph.cross_solution_edges()

    def test_framework_references_do_not_form_cycles(self, make_solution: Callable) -> None:
        solution = make_solution("Main", {"App": ["System.Runtime"], "System.Runtime": ["App"]})
        filtered = run_analysis(AnalysisInput(solutions=[solution]), include_extraction_scores=False)
        unfiltered = run_analysis(AnalysisInput(solutions=[solution]), filter_frameworks=False, include_extraction_scores=False)

        assert filtered.cycles == []
        assert filtered.statistics.total_projects_analyzed == 2
        assert len(unfiltered.cycles) == 1

    def test_none_input(self) -> None:
        with pytest.raises(ValidationError):
            run_analysis(None)  # type: ignore[arg-type]

    def test_cancellation(self, abc_input: AnalysisInput) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            run_analysis(abc_input, cancel_token=token)
