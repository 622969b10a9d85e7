#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for depmap.graph_builder (multi-solution merge and dangling references)."""

import logging
from typing import Callable

import pytest

from depmap.cancellation import CancellationToken
from depmap.constants import OperationCancelledError, ValidationError
from depmap.graph_builder import GraphBuildReport, SolutionDataset, SolutionProject, build_dependency_graph


@pytest.mark.unit
class TestBuildDependencyGraph:
    """Tests for build_dependency_graph()."""

    def test_single_solution(self, make_solution: Callable, path_of: Callable) -> None:
        """Vertices and edges mirror the declared references."""
        graph = build_dependency_graph([make_solution("Main", {"A": ["B"], "B": ["C"], "C": []})])

        assert graph.vertex_count == 3
        assert graph.edge_count == 2
        assert graph.is_frozen
        a = graph.find_vertex(path_of("A"))
        assert a is not None
        assert a.solution == "Main"
        assert [v.name for v in graph.successors(a)] == ["B"]

    def test_empty_input(self) -> None:
        """No solutions, or a solution with no projects, yields an empty graph."""
        assert build_dependency_graph([]).vertex_count == 0
        graph = build_dependency_graph([SolutionDataset("Empty")])
        assert graph.vertex_count == 0
        assert graph.edge_count == 0

    def test_none_input_raises(self) -> None:
        """A missing solution list is an invariant violation."""
        with pytest.raises(ValidationError):
            build_dependency_graph(None)  # type: ignore[arg-type]

    def test_dangling_reference_skipped(self, make_solution: Callable, caplog: pytest.LogCaptureFixture) -> None:
        """References to unloaded projects are logged and omitted."""
        report = GraphBuildReport()
        with caplog.at_level(logging.WARNING):
            graph = build_dependency_graph([make_solution("Main", {"A": ["Missing"]})], report=report)

        assert graph.vertex_count == 1
        assert graph.edge_count == 0
        assert len(report.dangling_references) == 1
        assert "target project not loaded" in caplog.text

    def test_malformed_reference_skipped(self, path_of: Callable) -> None:
        """An empty reference path is treated as dangling, not fatal."""
        solution = SolutionDataset("Main", (SolutionProject(path_of("A"), "A", references=("",)),))
        report = GraphBuildReport()
        graph = build_dependency_graph([solution], report=report)
        assert graph.edge_count == 0
        assert report.dangling_references == [(path_of("A"), "")]

    def test_every_edge_endpoint_is_a_vertex(self, make_solution: Callable) -> None:
        """No dangling edge survives the builder."""
        graph = build_dependency_graph([make_solution("Main", {"A": ["B", "Z"], "B": ["Y", "A"], "C": ["A"]})])
        for edge in graph.edges:
            assert edge.source in graph
            assert edge.target in graph

    def test_duplicate_references_collapse(self, path_of: Callable) -> None:
        """Repeated references produce one edge."""
        solution = SolutionDataset(
            "Main",
            (
                SolutionProject(path_of("A"), "A", references=(path_of("B"), path_of("b").upper())),
                SolutionProject(path_of("B"), "B"),
            ),
        )
        report = GraphBuildReport()
        graph = build_dependency_graph([solution], report=report)
        assert graph.edge_count == 1
        assert report.duplicate_references == 1

    def test_cancellation(self, make_solution: Callable) -> None:
        """A cancelled token aborts the build."""
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            build_dependency_graph([make_solution("Main", {"A": []})], cancel_token=token)


@pytest.mark.unit
class TestMultiSolutionMerge:
    """Two solutions sharing project X; X -> Y declared only in solution 2."""

    def test_shared_project_collapses_to_one_vertex(self, make_solution: Callable, path_of: Callable, caplog: pytest.LogCaptureFixture) -> None:
        """X keeps its first-seen solution tag and a provenance note is logged."""
        first = make_solution("Sol1", {"X": []})
        second = make_solution("Sol2", {"X": ["Y"], "Y": []})
        report = GraphBuildReport()

        with caplog.at_level(logging.INFO):
            graph = build_dependency_graph([first, second], report=report)

        assert graph.vertex_count == 2
        x = graph.find_vertex(path_of("X"))
        assert x is not None
        assert x.solution == "Sol1"
        assert report.merged_projects == {path_of("X"): "Sol1"}
        assert "keeping first-seen solution" in caplog.text

    def test_cross_solution_flag_from_resolved_tags(self, make_solution: Callable, path_of: Callable) -> None:
        """X (Sol1) -> Y (Sol2) is cross-solution because of the resolved tags."""
        graph = build_dependency_graph([make_solution("Sol1", {"X": []}), make_solution("Sol2", {"X": ["Y"], "Y": []})])

        assert graph.edge_count == 1
        edge = graph.edges[0]
        assert (edge.source.name, edge.target.name) == ("X", "Y")
        assert edge.is_cross_solution
        assert graph.cross_solution_edges() == [edge]

    def test_same_solution_edge_not_cross(self, make_solution: Callable) -> None:
        """When X is first seen in Sol2 too, X -> Y is not cross-solution."""
        graph = build_dependency_graph([make_solution("Sol2", {"X": ["Y"], "Y": []}), make_solution("Sol1", {"X": []})])
        assert not graph.edges[0].is_cross_solution
