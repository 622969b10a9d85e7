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
"""Circular dependency detection over strongly connected components.

Components come from networkx.strongly_connected_components, which is
non-recursive, so deep project chains never hit the interpreter's recursion
limit. Members and components are ordered by graph insertion order, which
makes cycle ids and member lists reproducible for identical input.
"""

import logging
from typing import List, Optional, Set
from dataclasses import dataclass, field

import networkx as nx

from depmap.cancellation import CancellationToken, check_cancelled
from depmap.constants import ValidationError
from depmap.graph_model import DependencyEdge, DependencyGraph, ProjectVertex

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class CycleInfo:
    """One circular dependency (non-trivial strongly connected component).

    Created by detect_cycles() and enriched in place by identify_weak_edges();
    read-only afterwards.

    Attributes:
        cycle_id: Sequential id in detection order (1-based)
        projects: Member vertices in graph insertion order
        has_self_loop: True for a single project that references itself
        weak_coupling_edges: In-cycle edges sharing the minimum coupling score
        weak_coupling_score: That minimum score (None until coupling analysis ran)
        candidate_edge_count: Number of in-cycle edges the weak edges were chosen from
    """

    cycle_id: int
    projects: List[ProjectVertex]
    has_self_loop: bool = False
    weak_coupling_edges: List[DependencyEdge] = field(default_factory=list)
    weak_coupling_score: Optional[int] = None
    candidate_edge_count: int = 0

    def __post_init__(self) -> None:
        if self.projects is None:
            raise ValidationError("Cycle projects must not be None")
        if len(self.projects) < 2 and not (len(self.projects) == 1 and self.has_self_loop):
            raise ValidationError(f"Cycle {self.cycle_id} must contain at least 2 projects or a self-referencing project")

    @property
    def cycle_size(self) -> int:
        return len(self.projects)

    def member_keys(self) -> Set[str]:
        return {project.key for project in self.projects}

    def __str__(self) -> str:
        names = ", ".join(project.name for project in self.projects)
        return f"Cycle {self.cycle_id} ({self.cycle_size} projects): {names}"


def find_strongly_connected_components(
    graph: DependencyGraph, cancel_token: Optional[CancellationToken] = None
) -> List[List[str]]:
    """Find all strongly connected components of the graph.

    Args:
        graph: Dependency graph
        cancel_token: Optional cooperative cancellation token, checked per component

    Returns:
        Components as lists of identity keys. Members are listed in graph
        insertion order and components are ordered by their first-inserted
        member. Trivial single-vertex components are included.
    """
    position = {key: index for index, key in enumerate(graph.vertex_keys())}

    components: List[List[str]] = []
    for scc in nx.strongly_connected_components(graph.to_networkx()):
        check_cancelled(cancel_token)
        components.append(sorted(scc, key=position.__getitem__))

    components.sort(key=lambda component: position[component[0]])
    return components


def detect_cycles(graph: DependencyGraph, cancel_token: Optional[CancellationToken] = None) -> List[CycleInfo]:
    """Detect circular dependency chains.

    Every component of size >= 2, and every single project with a self-edge,
    becomes a CycleInfo. Ids are assigned sequentially in component order.

    Args:
        graph: Dependency graph
        cancel_token: Optional cooperative cancellation token

    Returns:
        List of CycleInfo (empty for an empty or acyclic graph)

    Raises:
        ValidationError: If graph is None
        OperationCancelledError: If cancellation is requested
    """
    if graph is None:
        raise ValidationError("graph must not be None")

    if graph.vertex_count == 0:
        logger.info("Empty graph provided, no cycles to detect")
        return []

    logger.info("Detecting circular dependencies in %s projects", graph.vertex_count)

    cycles: List[CycleInfo] = []
    for component in find_strongly_connected_components(graph, cancel_token):
        check_cancelled(cancel_token)
        members = [graph.vertex(key) for key in component]
        if len(members) == 1:
            vertex = members[0]
            if not graph.has_edge(vertex, vertex):
                continue
            cycles.append(CycleInfo(cycle_id=len(cycles) + 1, projects=members, has_self_loop=True))
            logger.debug("Project %s references itself", vertex.name)
            continue
        cycles.append(CycleInfo(cycle_id=len(cycles) + 1, projects=members))

    logger.info("Found %s circular dependency chain(s)", len(cycles))
    return cycles
