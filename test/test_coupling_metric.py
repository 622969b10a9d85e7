#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for depmap.coupling_metric."""

from typing import Callable

import pytest

from depmap.cancellation import CancellationToken
from depmap.constants import OperationCancelledError, ValidationError
from depmap.coupling_metric import CouplingMetricCalculator, calculate_coupling_metrics, raw_coupling_score
from depmap.graph_model import DependencyGraph, ProjectVertex
from depmap.metric_types import MetricKind


@pytest.mark.unit
class TestCouplingMetric:
    """Tests for the graph coupling metric."""

    def test_raw_score_weighs_incoming_double(self) -> None:
        assert raw_coupling_score(2, 1) == 5
        assert raw_coupling_score(0, 3) == 3

    def test_normalized_against_maximum(self, abc_cycle_graph: DependencyGraph) -> None:
        """A (2 in, 1 out) is the most coupled project and scores 100."""
        metrics = {m.project_name: m for m in calculate_coupling_metrics(abc_cycle_graph)}

        assert (metrics["A"].incoming_count, metrics["A"].outgoing_count, metrics["A"].total_score) == (2, 1, 5)
        assert metrics["A"].normalized_score == pytest.approx(100.0)
        assert metrics["B"].normalized_score == pytest.approx(60.0)
        assert metrics["C"].normalized_score == pytest.approx(60.0)
        assert metrics["D"].normalized_score == pytest.approx(20.0)
        assert not any(m.is_fallback for m in metrics.values())

    def test_graph_order(self, abc_cycle_graph: DependencyGraph) -> None:
        metrics = calculate_coupling_metrics(abc_cycle_graph)
        assert [m.project_name for m in metrics] == [v.name for v in abc_cycle_graph.vertices]

    def test_isolated_projects_score_zero(self, make_graph: Callable) -> None:
        """No edges at all: every project scores 0 instead of dividing by zero."""
        metrics = calculate_coupling_metrics(make_graph({"A": [], "B": []}))
        assert [m.normalized_score for m in metrics] == [0.0, 0.0]

    def test_project_outside_graph(self, abc_cycle_graph: DependencyGraph) -> None:
        """Unknown projects get a fallback marker and score 0."""
        calculator = CouplingMetricCalculator(abc_cycle_graph)
        metric = calculator.calculate(ProjectVertex("/src/Other/Other.csproj", "Other", "Sol"))
        assert metric.is_fallback
        assert metric.normalized_score == 0.0
        assert calculator.kind is MetricKind.COUPLING

    def test_empty_graph(self) -> None:
        assert calculate_coupling_metrics(DependencyGraph()) == []

    def test_none_graph(self) -> None:
        with pytest.raises(ValidationError):
            calculate_coupling_metrics(None)  # type: ignore[arg-type]
        with pytest.raises(ValidationError):
            CouplingMetricCalculator(None)  # type: ignore[arg-type]

    def test_cancellation(self, abc_cycle_graph: DependencyGraph) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            calculate_coupling_metrics(abc_cycle_graph, token)
