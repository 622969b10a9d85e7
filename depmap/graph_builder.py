#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Merge one or more solution datasets into a single dependency graph.

The builder never raises on partial or inconsistent input: duplicate
projects keep their first-seen solution tag and dangling references are
skipped, each with a logged diagnostic.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from depmap.cancellation import CancellationToken, check_cancelled
from depmap.constants import ValidationError
from depmap.graph_model import DependencyGraph, ProjectVertex, project_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolutionProject:
    """One resolved project record from a solution.

    Attributes:
        path: Path to the project's build file
        name: Display name
        is_framework: Framework/third-party flag set by an external filter
        references: Paths of the projects this project references
    """

    path: str
    name: str = ""
    is_framework: bool = False
    references: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SolutionDataset:
    """All resolved projects of one solution."""

    solution_id: str
    projects: Tuple[SolutionProject, ...] = ()


@dataclass
class GraphBuildReport:
    """Diagnostics collected while building a graph.

    Attributes:
        merged_projects: Paths seen in more than one solution (path -> kept solution id)
        dangling_references: (source path, reference) pairs skipped because the target is unknown
        duplicate_references: Number of references that collapsed onto an existing edge
    """

    merged_projects: Dict[str, str] = field(default_factory=dict)
    dangling_references: List[Tuple[str, str]] = field(default_factory=list)
    duplicate_references: int = 0


def build_dependency_graph(
    solutions: Sequence[SolutionDataset],
    cancel_token: Optional[CancellationToken] = None,
    report: Optional[GraphBuildReport] = None,
) -> DependencyGraph:
    """Build one frozen DependencyGraph from one or more solutions.

    Pass 1 inserts every project as a vertex keyed by its normalized path; a
    path already present from a different solution keeps its first-seen
    solution tag. Pass 2 inserts an edge for every declared reference whose
    endpoints both exist.

    Args:
        solutions: Solution datasets in load order
        cancel_token: Optional cooperative cancellation token
        report: Optional report that receives merge/skip diagnostics

    Returns:
        Frozen DependencyGraph

    Raises:
        ValidationError: If solutions is None or a project has a malformed path
        OperationCancelledError: If cancellation is requested
    """
    if solutions is None:
        raise ValidationError("solutions must not be None")
    if report is None:
        report = GraphBuildReport()

    graph = DependencyGraph()
    project_count = sum(len(solution.projects) for solution in solutions)
    logger.info("Building dependency graph from %s solution(s) with %s project record(s)", len(solutions), project_count)

    # Pass 1: vertices
    for solution in solutions:
        for project in solution.projects:
            check_cancelled(cancel_token)
            vertex = ProjectVertex(path=project.path, name=project.name, solution=solution.solution_id, is_framework=project.is_framework)
            if graph.add_vertex(vertex):
                continue

            existing = graph.vertex(vertex.key)
            if existing.solution != solution.solution_id:
                report.merged_projects[existing.path] = existing.solution
                logger.info(
                    "Project %s appears in solutions '%s' and '%s'; keeping first-seen solution '%s'",
                    existing.name,
                    existing.solution,
                    solution.solution_id,
                    existing.solution,
                )
            else:
                logger.debug("Project %s listed twice in solution '%s'", existing.name, solution.solution_id)

    # Pass 2: edges
    for solution in solutions:
        for project in solution.projects:
            check_cancelled(cancel_token)
            source = graph.vertex(project_key(project.path))
            for reference in project.references:
                target = _resolve_reference(graph, reference)
                if target is None:
                    report.dangling_references.append((source.path, str(reference)))
                    logger.warning("Skipping reference %s -> %s: target project not loaded", source.name, reference)
                    continue
                if not graph.add_edge(source, target):
                    report.duplicate_references += 1

    graph.freeze()

    cross_solution = len(graph.cross_solution_edges())
    logger.info(
        "Built dependency graph with %s projects and %s edges (%s cross-solution, %s dangling references skipped)",
        graph.vertex_count,
        graph.edge_count,
        cross_solution,
        len(report.dangling_references),
    )
    return graph


def _resolve_reference(graph: DependencyGraph, reference: str) -> Optional[ProjectVertex]:
    """Return the vertex a reference points to, or None if it is malformed or unknown."""
    try:
        return graph.find_vertex(reference)
    except ValidationError:
        return None
