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
"""Cycle-breaking recommendations ranked across all cycles."""

import logging
import dataclasses
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass

from depmap.cancellation import CancellationToken, check_cancelled
from depmap.constants import ValidationError
from depmap.cycle_detector import CycleInfo
from depmap.graph_model import DependencyEdge, ProjectVertex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleBreakingSuggestion:
    """The single edge proposed as the cut point for one cycle.

    Attributes:
        cycle_id: Id of the cycle this suggestion breaks
        source: Project that holds the reference to remove
        target: Referenced project
        coupling_score: Method calls across the edge
        cycle_size: Number of projects in the cycle
        rationale: Human readable explanation
        rank: 1-based global rank (1 = easiest cut overall), 0 until ranked
    """

    cycle_id: int
    source: ProjectVertex
    target: ProjectVertex
    coupling_score: int
    cycle_size: int
    rationale: str
    rank: int = 0

    @property
    def rank_key(self) -> Tuple[int, int, str, str]:
        return (self.coupling_score, self.cycle_size, self.source.path, self.target.path)

    def __str__(self) -> str:
        return f"#{self.rank} {self.source.name} -> {self.target.name} (cycle {self.cycle_id}, coupling {self.coupling_score})"


def describe_cycle_impact(cycle_size: int) -> str:
    if cycle_size >= 10:
        return f"critical {cycle_size}-project cycle"
    if cycle_size >= 6:
        return f"large {cycle_size}-project cycle"
    if cycle_size >= 4:
        return f"{cycle_size}-project cycle"
    return f"small {cycle_size}-project cycle"


def describe_coupling(coupling_score: int) -> str:
    if coupling_score == 0:
        return "no detected method calls"
    if coupling_score == 1:
        return "only 1 method call"
    if coupling_score == 2:
        return "just 2 method calls"
    if coupling_score <= 5:
        return f"only {coupling_score} method calls"
    return f"{coupling_score} method calls"


def build_rationale(coupling_score: int, cycle_size: int, candidate_count: int) -> str:
    """Build the explanation shown next to a suggestion.

    Example: "Weakest link in small 3-project cycle, just 2 method calls (weakest of 3 candidates)"
    """
    return (
        f"Weakest link in {describe_cycle_impact(cycle_size)}, {describe_coupling(coupling_score)} "
        f"(weakest of {candidate_count} candidates)"
    )


def select_cut_edge(cycle: CycleInfo) -> Optional[DependencyEdge]:
    """Pick one edge among the cycle's weak edges; ties go to the smallest (source path, target path)."""
    if not cycle.weak_coupling_edges:
        return None
    return min(cycle.weak_coupling_edges, key=lambda edge: edge.sort_key)


def generate_recommendations(
    cycles: Sequence[CycleInfo], cancel_token: Optional[CancellationToken] = None
) -> List[CycleBreakingSuggestion]:
    """Generate one globally ranked cycle-breaking suggestion per cycle.

    Cycles without weak edges (coupling analysis not run, or no in-cycle edges)
    are skipped. Suggestions are sorted by ascending coupling score, then
    ascending cycle size, then source path and target path, and ranked 1..N
    in that order. Callers may truncate the list without re-ranking.

    Args:
        cycles: Cycles enriched by identify_weak_edges()
        cancel_token: Optional cooperative cancellation token

    Returns:
        Ranked suggestions, rank 1 first

    Raises:
        ValidationError: If cycles is None
        OperationCancelledError: If cancellation is requested
    """
    if cycles is None:
        raise ValidationError("cycles must not be None")

    logger.debug("Generating cycle-breaking recommendations from %s cycles", len(cycles))

    suggestions: List[CycleBreakingSuggestion] = []
    for cycle in cycles:
        check_cancelled(cancel_token)
        edge = select_cut_edge(cycle)
        if edge is None:
            logger.debug("Cycle %s: no weak edges identified, skipping", cycle.cycle_id)
            continue

        score = cycle.weak_coupling_score if cycle.weak_coupling_score is not None else 0
        candidates = cycle.candidate_edge_count or len(cycle.weak_coupling_edges)
        if len(cycle.weak_coupling_edges) > 1:
            logger.debug(
                "Cycle %s: %s weak edges tie at %s, choosing %s", cycle.cycle_id, len(cycle.weak_coupling_edges), score, edge
            )
        suggestions.append(
            CycleBreakingSuggestion(
                cycle_id=cycle.cycle_id,
                source=edge.source,
                target=edge.target,
                coupling_score=score,
                cycle_size=cycle.cycle_size,
                rationale=build_rationale(score, cycle.cycle_size, candidates),
            )
        )

    suggestions.sort(key=lambda suggestion: suggestion.rank_key)
    ranked = [dataclasses.replace(suggestion, rank=index) for index, suggestion in enumerate(suggestions, start=1)]

    logger.debug("Generated %s cycle-breaking recommendations", len(ranked))
    if ranked:
        top = ranked[0]
        logger.info(
            "Top recommendation: %s -> %s (coupling: %s, cycle size: %s)",
            top.source.name,
            top.target.name,
            top.coupling_score,
            top.cycle_size,
        )
    return ranked
