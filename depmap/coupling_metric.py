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
"""Coupling metric: how entangled a project is with the rest of the graph.

Raw score = incoming edges * 2 + outgoing edges. Consumers weigh double since
every dependent has to be migrated along with an extracted project. Scores
are normalized relative to the most coupled project in the graph, which
scores 100.
"""

import logging
from typing import List, Optional

from depmap.cancellation import CancellationToken, check_cancelled
from depmap.constants import INCOMING_COUPLING_WEIGHT, NORMALIZED_SCORE_MAX, OUTGOING_COUPLING_WEIGHT, ValidationError
from depmap.graph_model import DependencyGraph, ProjectVertex
from depmap.metric_types import CouplingMetric, Fallback, MetricCalculator, MetricKind, clamp_score

logger = logging.getLogger(__name__)


def raw_coupling_score(incoming_count: int, outgoing_count: int) -> int:
    return incoming_count * INCOMING_COUPLING_WEIGHT + outgoing_count * OUTGOING_COUPLING_WEIGHT


class CouplingMetricCalculator(MetricCalculator):
    """Coupling metric relative to the graph-wide maximum.

    The maximum raw score is computed once at construction, so calculate()
    is a pure lookup for every project of the graph.
    """

    kind = MetricKind.COUPLING

    def __init__(self, graph: DependencyGraph, cancel_token: Optional[CancellationToken] = None) -> None:
        if graph is None:
            raise ValidationError("graph must not be None")
        self._graph = graph
        self.max_total_score = 0
        for vertex in graph.vertices:
            check_cancelled(cancel_token)
            total = raw_coupling_score(graph.in_degree(vertex), graph.out_degree(vertex))
            self.max_total_score = max(self.max_total_score, total)

    def calculate(self, project: ProjectVertex) -> CouplingMetric:
        if project not in self._graph:
            logger.warning("Project %s is not part of the dependency graph, coupling score 0", project.name)
            return CouplingMetric(
                project_path=project.path,
                project_name=project.name,
                incoming_count=0,
                outgoing_count=0,
                total_score=0,
                normalized_score=0.0,
                fallback=Fallback("project not in dependency graph"),
            )

        incoming = self._graph.in_degree(project)
        outgoing = self._graph.out_degree(project)
        total = raw_coupling_score(incoming, outgoing)
        if self.max_total_score == 0:
            normalized = 0.0
        else:
            normalized = clamp_score(total / self.max_total_score * NORMALIZED_SCORE_MAX)

        logger.debug(
            "Project %s: incoming=%s, outgoing=%s, total=%s, normalized=%.2f", project.name, incoming, outgoing, total, normalized
        )
        return CouplingMetric(
            project_path=project.path,
            project_name=project.name,
            incoming_count=incoming,
            outgoing_count=outgoing,
            total_score=total,
            normalized_score=normalized,
        )


def calculate_coupling_metrics(graph: DependencyGraph, cancel_token: Optional[CancellationToken] = None) -> List[CouplingMetric]:
    """Coupling metrics for every project, in graph order."""
    if graph is None:
        raise ValidationError("graph must not be None")

    logger.info("Calculating coupling metrics for %s projects", graph.vertex_count)
    if graph.vertex_count == 0:
        return []

    calculator = CouplingMetricCalculator(graph, cancel_token)
    metrics = []
    for vertex in graph.vertices:
        check_cancelled(cancel_token)
        metrics.append(calculator.calculate(vertex))

    logger.info("Coupling calculation complete: max total score=%s", calculator.max_total_score)
    return metrics
