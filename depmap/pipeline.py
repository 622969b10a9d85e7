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
"""End-to-end analysis run.

Builder -> Detector -> {Statistics, Coupling -> WeakEdge -> Ranker} on one
branch and {Metric calculators -> Combiner} on the other. Both branches read
only the frozen graph.
"""

import logging
from typing import List, Optional
from dataclasses import dataclass, field

from depmap.cancellation import CancellationToken
from depmap.constants import ValidationError
from depmap.coupling_analyzer import identify_weak_edges
from depmap.cycle_detector import CycleInfo, detect_cycles
from depmap.cycle_statistics import CycleStatistics, calculate_cycle_statistics
from depmap.dataset_loader import AnalysisInput
from depmap.extraction_scoring import ExtractionScore, RankedExtractionCandidates, calculate_extraction_scores, rank_extraction_candidates
from depmap.framework_filter import apply_framework_flags, filter_framework_edges
from depmap.graph_builder import GraphBuildReport, build_dependency_graph
from depmap.graph_model import DependencyGraph
from depmap.recommendations import CycleBreakingSuggestion, generate_recommendations
from depmap.scoring_config import ScoringConfig

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResults:
    """Everything one analysis run produces for the reporting layer.

    Attributes:
        graph: Merged dependency graph (framework references removed when filtering)
        build_report: Merge and skip diagnostics from graph building
        cycles: Detected cycles, enriched with weak edges
        statistics: Cycle statistics
        recommendations: Globally ranked cycle-breaking suggestions
        extraction_scores: Extraction scores, easiest first (empty when skipped)
        ranked_candidates: Easiest/hardest shortlists (None when skipped)
    """

    graph: DependencyGraph
    build_report: GraphBuildReport
    cycles: List[CycleInfo]
    statistics: CycleStatistics
    recommendations: List[CycleBreakingSuggestion]
    extraction_scores: List[ExtractionScore] = field(default_factory=list)
    ranked_candidates: Optional[RankedExtractionCandidates] = None


def run_analysis(
    analysis_input: AnalysisInput,
    config: Optional[ScoringConfig] = None,
    filter_frameworks: bool = True,
    include_extraction_scores: bool = True,
    max_workers: Optional[int] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> AnalysisResults:
    """Run the complete analysis over pre-resolved input.

    Args:
        analysis_input: Solutions plus external measurements
        config: Scoring configuration (defaults when None)
        filter_frameworks: Flag framework projects and drop references into them
        include_extraction_scores: False to run the cycle branch only
        max_workers: Overrides config.max_workers for extraction scoring
        cancel_token: Optional cooperative cancellation token

    Returns:
        AnalysisResults

    Raises:
        ValidationError: On invariant violations in the input
        OperationCancelledError: If cancellation is requested
    """
    if analysis_input is None:
        raise ValidationError("analysis_input must not be None")
    if config is None:
        config = ScoringConfig()

    solutions = analysis_input.solutions
    if filter_frameworks:
        solutions = apply_framework_flags(solutions, config.filter)

    report = GraphBuildReport()
    graph = build_dependency_graph(solutions, cancel_token, report)
    if filter_frameworks:
        graph = filter_framework_edges(graph, config.filter, cancel_token)

    cycles = detect_cycles(graph, cancel_token)
    statistics = calculate_cycle_statistics(cycles, graph.vertex_count, cancel_token)
    identify_weak_edges(cycles, graph, analysis_input.call_counts, cancel_token)
    recommendations = generate_recommendations(cycles, cancel_token)

    results = AnalysisResults(
        graph=graph,
        build_report=report,
        cycles=cycles,
        statistics=statistics,
        recommendations=recommendations,
    )

    if include_extraction_scores:
        workers = max_workers if max_workers is not None else config.max_workers
        results.extraction_scores = calculate_extraction_scores(
            graph,
            complexity_data=analysis_input.complexity_data,
            target_frameworks=analysis_input.target_frameworks,
            endpoint_counts=analysis_input.endpoint_counts,
            weights=config.weights,
            max_workers=workers,
            cancel_token=cancel_token,
        )
        results.ranked_candidates = rank_extraction_candidates(results.extraction_scores)

    logger.info(
        "Analysis complete: %s projects, %s cycles, %s recommendations, %s extraction scores",
        graph.vertex_count,
        len(cycles),
        len(recommendations),
        len(results.extraction_scores),
    )
    return results
