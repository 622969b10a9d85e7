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
"""Extraction difficulty scoring: four metrics combined into one 0-100 score.

FinalScore = sum(weight_i * score_i) over the metrics that are present. A
missing coupling metric contributes 0 and its weight is not redistributed,
so the result is an accepted partial sum. Weight sums are validated by
scoring_config before they get here; this module only rejects negative
weights.
"""

import logging
from enum import Enum
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Sequence
from dataclasses import dataclass, field

import numpy as np

from depmap.cancellation import CancellationToken, check_cancelled
from depmap.complexity_metric import ComplexityMetricCalculator
from depmap.constants import EASY_MAX_SCORE, MEDIUM_MAX_SCORE, RANKED_CANDIDATE_LIMIT, OperationCancelledError, ValidationError
from depmap.coupling_metric import CouplingMetricCalculator
from depmap.external_api_metric import ExternalApiMetricCalculator
from depmap.graph_model import DependencyGraph, ProjectVertex
from depmap.metric_types import (
    ComplexityData,
    ComplexityMetric,
    CouplingMetric,
    ExternalApiMetric,
    MetricKind,
    TechDebtMetric,
    clamp_score,
)
from depmap.scoring_config import ScoringWeights
from depmap.tech_debt_metric import TechDebtMetricCalculator

logger = logging.getLogger(__name__)


class DifficultyCategory(Enum):
    """Three-tier extraction difficulty."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


def classify_difficulty(score: float) -> DifficultyCategory:
    """Easy <= 33, Medium <= 66, Hard otherwise."""
    if score <= EASY_MAX_SCORE:
        return DifficultyCategory.EASY
    if score <= MEDIUM_MAX_SCORE:
        return DifficultyCategory.MEDIUM
    return DifficultyCategory.HARD


def check_weights(weights: ScoringWeights) -> None:
    """Reject a missing weight set or any negative weight."""
    if weights is None:
        raise ValidationError("weights must not be None")
    for name, value in weights.as_dict().items():
        if value < 0:
            raise ValidationError(f"Scoring weight {name} must be non-negative, got {value}")


def combine_scores(
    coupling: Optional[CouplingMetric],
    complexity: ComplexityMetric,
    tech_debt: TechDebtMetric,
    external_api: ExternalApiMetric,
    weights: ScoringWeights,
) -> float:
    """Weighted sum of the metric scores, clamped to [0, 100].

    Args:
        coupling: Coupling metric, or None when unavailable (its term is 0)
        complexity: Complexity metric
        tech_debt: Tech debt metric
        external_api: External API metric
        weights: Metric weights

    Returns:
        Final extraction difficulty score

    Raises:
        ValidationError: If a weight is negative
    """
    check_weights(weights)
    total = (
        complexity.normalized_score * weights.complexity
        + tech_debt.normalized_score * weights.tech_debt
        + external_api.normalized_score * weights.external_exposure
    )
    if coupling is not None:
        total += coupling.normalized_score * weights.coupling
    return clamp_score(total)


@dataclass(frozen=True)
class ExtractionScore:
    """Extraction difficulty of one project.

    Attributes:
        project_path: Identity path of the project
        project_name: Display name
        final_score: Weighted combination of the metrics, 0-100
        coupling_metric: Coupling metric (None when coupling was not computed)
        complexity_metric: Complexity metric
        tech_debt_metric: Tech debt metric
        external_api_metric: External API metric
    """

    project_path: str
    project_name: str
    final_score: float
    coupling_metric: Optional[CouplingMetric]
    complexity_metric: ComplexityMetric
    tech_debt_metric: TechDebtMetric
    external_api_metric: ExternalApiMetric

    @property
    def difficulty_category(self) -> DifficultyCategory:
        return classify_difficulty(self.final_score)

    @property
    def fallback_metrics(self) -> List[MetricKind]:
        """Metrics whose score is a neutral fallback rather than a measurement."""
        kinds = []
        if self.coupling_metric is None or self.coupling_metric.is_fallback:
            kinds.append(MetricKind.COUPLING)
        if self.complexity_metric.is_fallback:
            kinds.append(MetricKind.COMPLEXITY)
        if self.tech_debt_metric.is_fallback:
            kinds.append(MetricKind.TECH_DEBT)
        if self.external_api_metric.is_fallback:
            kinds.append(MetricKind.EXTERNAL_API)
        return kinds


class ExtractionScorer:
    """Scores single projects with a fixed set of calculators and weights."""

    def __init__(
        self,
        complexity: ComplexityMetricCalculator,
        tech_debt: TechDebtMetricCalculator,
        external_api: ExternalApiMetricCalculator,
        weights: ScoringWeights,
        coupling: Optional[CouplingMetricCalculator] = None,
    ) -> None:
        check_weights(weights)
        self.coupling = coupling
        self.complexity = complexity
        self.tech_debt = tech_debt
        self.external_api = external_api
        self.weights = weights

    def score_project(self, project: ProjectVertex, cancel_token: Optional[CancellationToken] = None) -> ExtractionScore:
        check_cancelled(cancel_token)
        coupling_metric = self.coupling.calculate(project) if self.coupling is not None else None
        complexity_metric = self.complexity.calculate(project)
        tech_debt_metric = self.tech_debt.calculate(project)
        api_metric = self.external_api.calculate(project)

        final_score = combine_scores(coupling_metric, complexity_metric, tech_debt_metric, api_metric, self.weights)
        logger.debug(
            "Project %s: coupling=%s, complexity=%.1f, tech_debt=%.1f, api=%.1f -> %.2f (%s)",
            project.name,
            "n/a" if coupling_metric is None else f"{coupling_metric.normalized_score:.1f}",
            complexity_metric.normalized_score,
            tech_debt_metric.normalized_score,
            api_metric.normalized_score,
            final_score,
            classify_difficulty(final_score).value,
        )
        return ExtractionScore(
            project_path=project.path,
            project_name=project.name,
            final_score=final_score,
            coupling_metric=coupling_metric,
            complexity_metric=complexity_metric,
            tech_debt_metric=tech_debt_metric,
            external_api_metric=api_metric,
        )


def _score_concurrently(
    scorer: ExtractionScorer, projects: List[ProjectVertex], max_workers: int, cancel_token: Optional[CancellationToken]
) -> List[ExtractionScore]:
    """Score projects on a thread pool; results come back in input order."""
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures: List["Future[ExtractionScore]"] = [executor.submit(scorer.score_project, p, cancel_token) for p in projects]
        try:
            results = []
            for future in futures:
                check_cancelled(cancel_token)
                results.append(future.result())
            return results
        except OperationCancelledError:
            for future in futures:
                future.cancel()
            raise


def calculate_extraction_scores(
    graph: DependencyGraph,
    complexity_data: Optional[Mapping[str, Optional[ComplexityData]]] = None,
    target_frameworks: Optional[Mapping[str, Optional[str]]] = None,
    endpoint_counts: Optional[Mapping[str, Optional[int]]] = None,
    weights: Optional[ScoringWeights] = None,
    include_coupling: bool = True,
    max_workers: Optional[int] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[ExtractionScore]:
    """Score every project of the graph.

    Coupling is computed for the whole graph first, since it is relative to
    the graph maximum. The other three metrics are per project.

    Args:
        graph: Dependency graph
        complexity_data: Project path -> ComplexityData
        target_frameworks: Project path -> raw target framework string
        endpoint_counts: Project path -> external endpoint count
        weights: Metric weights (defaults when None)
        include_coupling: False to score without the coupling metric (partial sum)
        max_workers: Thread pool size; None or 1 scores sequentially
        cancel_token: Optional cooperative cancellation token

    Returns:
        Scores sorted ascending by final score (easiest first), ties by project path

    Raises:
        ValidationError: If graph is None or a weight is negative
        OperationCancelledError: If cancellation is requested
    """
    if graph is None:
        raise ValidationError("graph must not be None")
    if weights is None:
        weights = ScoringWeights()
    if max_workers is not None and max_workers < 1:
        raise ValidationError(f"max_workers must be positive, got {max_workers}")
    check_weights(weights)

    projects = graph.vertices
    logger.info("Calculating extraction scores for %s projects", len(projects))
    if not projects:
        return []

    scorer = ExtractionScorer(
        complexity=ComplexityMetricCalculator(complexity_data),
        tech_debt=TechDebtMetricCalculator(target_frameworks),
        external_api=ExternalApiMetricCalculator(endpoint_counts),
        weights=weights,
        coupling=CouplingMetricCalculator(graph, cancel_token) if include_coupling else None,
    )

    if max_workers is None or max_workers == 1:
        scores = [scorer.score_project(project, cancel_token) for project in projects]
    else:
        logger.debug("Scoring projects with %s worker threads", max_workers)
        scores = _score_concurrently(scorer, projects, max_workers, cancel_token)

    scores.sort(key=lambda score: (score.final_score, score.project_path))

    counts = _count_categories(scores)
    logger.info(
        "Calculated extraction scores for %s projects: %s easy, %s medium, %s hard",
        len(scores),
        counts[DifficultyCategory.EASY],
        counts[DifficultyCategory.MEDIUM],
        counts[DifficultyCategory.HARD],
    )
    return scores


def _count_categories(scores: Sequence[ExtractionScore]) -> Dict[DifficultyCategory, int]:
    counts = {category: 0 for category in DifficultyCategory}
    for score in scores:
        counts[score.difficulty_category] += 1
    return counts


@dataclass(frozen=True)
class ExtractionStatistics:
    """Category counts over all scored projects."""

    total_projects: int
    easy_count: int
    medium_count: int
    hard_count: int
    average_score: float = 0.0


@dataclass(frozen=True)
class RankedExtractionCandidates:
    """All scores plus quick-reference shortlists.

    Attributes:
        all_projects: Every score, easiest first
        easiest_candidates: Up to N Easy projects, ascending
        hardest_candidates: Up to N Hard projects, hardest first
        statistics: Category counts
    """

    all_projects: List[ExtractionScore] = field(default_factory=list)
    easiest_candidates: List[ExtractionScore] = field(default_factory=list)
    hardest_candidates: List[ExtractionScore] = field(default_factory=list)
    statistics: ExtractionStatistics = field(default_factory=lambda: ExtractionStatistics(0, 0, 0, 0))


def rank_extraction_candidates(scores: Sequence[ExtractionScore], limit: int = RANKED_CANDIDATE_LIMIT) -> RankedExtractionCandidates:
    """Build the easiest/hardest shortlists and category statistics.

    Args:
        scores: Extraction scores in any order
        limit: Maximum entries per shortlist

    Returns:
        RankedExtractionCandidates (empty lists for no scores)
    """
    if scores is None:
        raise ValidationError("scores must not be None")
    if not scores:
        logger.info("No projects to rank for extraction")
        return RankedExtractionCandidates()

    ordered = sorted(scores, key=lambda score: (score.final_score, score.project_path))
    easiest = [score for score in ordered if score.difficulty_category is DifficultyCategory.EASY][:limit]
    hardest = [score for score in reversed(ordered) if score.difficulty_category is DifficultyCategory.HARD][:limit]

    counts = _count_categories(ordered)
    statistics = ExtractionStatistics(
        total_projects=len(ordered),
        easy_count=counts[DifficultyCategory.EASY],
        medium_count=counts[DifficultyCategory.MEDIUM],
        hard_count=counts[DifficultyCategory.HARD],
        average_score=float(np.mean([score.final_score for score in ordered])),
    )

    if easiest:
        logger.debug("Top %s easiest candidates: %s", len(easiest), ", ".join(s.project_name for s in easiest))
    if hardest:
        logger.debug("Top %s hardest candidates: %s", len(hardest), ", ".join(s.project_name for s in hardest))
    logger.info(
        "Ranked %s extraction candidates: %s easy, %s medium, %s hard",
        statistics.total_projects,
        statistics.easy_count,
        statistics.medium_count,
        statistics.hard_count,
    )
    return RankedExtractionCandidates(all_projects=ordered, easiest_candidates=easiest, hardest_candidates=hardest, statistics=statistics)
