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
"""Coupling strength of in-cycle edges and weak-edge identification.

Coupling strength is the number of method calls from the source project's
code into the target project, supplied by an external call-analysis
collaborator. Edges without call data score 0.
"""

import logging
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
from dataclasses import dataclass

from depmap.cancellation import CancellationToken, check_cancelled
from depmap.constants import MEDIUM_COUPLING_MAX_CALLS, MISSING_CALL_COUNT_SCORE, WEAK_COUPLING_MAX_CALLS, ValidationError
from depmap.cycle_detector import CycleInfo
from depmap.graph_model import DependencyEdge, DependencyGraph, project_key

logger = logging.getLogger(__name__)

CallCountIndex = Dict[Tuple[str, str], int]


class CouplingStrength(Enum):
    """Coarse classification of a method-call count."""

    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


def classify_coupling_strength(method_call_count: int) -> CouplingStrength:
    """Classify a call count: <= 5 weak, <= 20 medium, otherwise strong."""
    if method_call_count <= WEAK_COUPLING_MAX_CALLS:
        return CouplingStrength.WEAK
    if method_call_count <= MEDIUM_COUPLING_MAX_CALLS:
        return CouplingStrength.MEDIUM
    return CouplingStrength.STRONG


@dataclass(frozen=True)
class CouplingEdgeScore:
    """An edge with its method-call coupling score."""

    edge: DependencyEdge
    score: int

    def __post_init__(self) -> None:
        if self.score < 0:
            raise ValidationError(f"Coupling score must be non-negative, got {self.score} for {self.edge}")

    @property
    def strength(self) -> CouplingStrength:
        return classify_coupling_strength(self.score)


def build_call_count_index(call_counts: Optional[Mapping[Tuple[str, str], int]]) -> CallCountIndex:
    """Normalize a (source path, target path) -> call count mapping to identity keys.

    Repeated pairs, including different spellings of the same project paths,
    accumulate. Malformed paths and negative or non-integer counts are logged
    and dropped, so the affected edges fall back to a score of 0.
    """
    index: CallCountIndex = {}
    if not call_counts:
        return index

    for (source_path, target_path), count in call_counts.items():
        try:
            key = (project_key(source_path), project_key(target_path))
        except ValidationError:
            logger.warning("Ignoring call count for malformed project pair (%r, %r)", source_path, target_path)
            continue
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            logger.warning("Ignoring invalid call count %r for %s -> %s", count, source_path, target_path)
            continue
        index[key] = index.get(key, 0) + count
    return index


def score_edge(edge: DependencyEdge, call_index: CallCountIndex) -> CouplingEdgeScore:
    """Look up an edge's coupling score, falling back to 0 when no data exists."""
    count = call_index.get((edge.source.key, edge.target.key))
    if count is None:
        logger.debug("Edge %s: no method call data, using %s", edge, MISSING_CALL_COUNT_SCORE)
        count = MISSING_CALL_COUNT_SCORE
    return CouplingEdgeScore(edge=edge, score=count)


def get_edges_in_cycle(cycle: CycleInfo, graph: DependencyGraph) -> List[DependencyEdge]:
    """All graph edges whose source and target are both members of the cycle.

    A self-referencing edge only breaks a size-1 cycle, so it is not a candidate
    inside a larger cycle.
    """
    members = cycle.member_keys()
    edges: List[DependencyEdge] = []
    for project in cycle.projects:
        for edge in graph.out_edges(project):
            if edge.target.key not in members:
                continue
            if edge.is_self_loop and cycle.cycle_size >= 2:
                logger.debug("Cycle %s: skipping self-reference %s", cycle.cycle_id, edge)
                continue
            edges.append(edge)
    return edges


def analyze_cycle_coupling(
    cycles: Sequence[CycleInfo],
    graph: DependencyGraph,
    call_counts: Optional[Mapping[Tuple[str, str], int]] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> Dict[int, List[CouplingEdgeScore]]:
    """Score every in-cycle edge.

    Args:
        cycles: Detected cycles
        graph: Dependency graph the cycles were detected in
        call_counts: (source path, target path) -> method call count; missing pairs score 0
        cancel_token: Optional cooperative cancellation token

    Returns:
        Mapping of cycle id to the scored in-cycle edges of that cycle
    """
    if cycles is None:
        raise ValidationError("cycles must not be None")
    if graph is None:
        raise ValidationError("graph must not be None")

    call_index = build_call_count_index(call_counts)
    if cycles and not call_index:
        logger.warning("No method call data available, all in-cycle edges score %s", MISSING_CALL_COUNT_SCORE)

    scored: Dict[int, List[CouplingEdgeScore]] = {}
    for cycle in cycles:
        check_cancelled(cancel_token)
        scored[cycle.cycle_id] = [score_edge(edge, call_index) for edge in get_edges_in_cycle(cycle, graph)]
    return scored


def identify_weak_edges(
    cycles: Sequence[CycleInfo],
    graph: DependencyGraph,
    call_counts: Optional[Mapping[Tuple[str, str], int]] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> Sequence[CycleInfo]:
    """Flag the minimum-coupling edge(s) of every cycle.

    All edges tying on the minimum score are kept; the recommendation ranker
    resolves ties. Results are stored on each CycleInfo in place.

    Returns:
        The same cycles, enriched
    """
    if cycles is None:
        raise ValidationError("cycles must not be None")
    if not cycles:
        logger.info("No cycles to analyze for weak coupling edges")
        return cycles

    logger.info("Analyzing %s cycles for weak coupling edges", len(cycles))
    scored = analyze_cycle_coupling(cycles, graph, call_counts, cancel_token)

    # Compute everything before touching the cycles so a cancelled run leaves them untouched
    results: List[Tuple[CycleInfo, List[DependencyEdge], int, int]] = []
    for cycle in cycles:
        check_cancelled(cancel_token)
        edge_scores = scored[cycle.cycle_id]
        if not edge_scores:
            logger.warning("Cycle %s with %s projects has no edges - skipping weak edge analysis", cycle.cycle_id, cycle.cycle_size)
            continue

        min_score = min(edge_score.score for edge_score in edge_scores)
        weak_edges = [edge_score.edge for edge_score in edge_scores if edge_score.score == min_score]
        results.append((cycle, weak_edges, min_score, len(edge_scores)))
        logger.debug(
            "Cycle %s: %s edges, min coupling = %s, %s weak edges flagged",
            cycle.cycle_id,
            len(edge_scores),
            min_score,
            len(weak_edges),
        )

    total_weak_edges = 0
    for cycle, weak_edges, min_score, candidate_count in results:
        cycle.weak_coupling_edges = weak_edges
        cycle.weak_coupling_score = min_score
        cycle.candidate_edge_count = candidate_count
        total_weak_edges += len(weak_edges)

    logger.info(
        "Identified %s weak coupling edges across %s cycles (avg %.1f per cycle)",
        total_weak_edges,
        len(cycles),
        total_weak_edges / len(cycles),
    )
    return cycles
