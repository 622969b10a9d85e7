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
"""Dependency graph model: project vertices, dependency edges and the graph arena.

Vertices are keyed by a stable identity string derived from the project's
build-file path. The graph stores vertices and edges in a NetworkX DiGraph
keyed by that identity, so no object holds references back to its neighbours
and iteration order follows insertion order.
"""

import os
import re
import logging
import posixpath
from typing import Any, Iterator, List, Optional, Tuple
from dataclasses import dataclass

import networkx as nx

from depmap.constants import GraphBuildError, ValidationError

logger = logging.getLogger(__name__)

_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:/")


def normalize_project_path(path: str) -> str:
    """Normalize a build-file path into its canonical absolute form.

    Backslashes become forward slashes, relative paths are made absolute
    against the current directory and '.'/'..' segments are collapsed.
    Windows drive paths are kept as-is so solution files produced on Windows
    resolve identically on any host.

    Args:
        path: Raw path to a project build file

    Returns:
        Normalized path string (case preserved)

    Raises:
        ValidationError: If path is not a non-empty string
    """
    if not isinstance(path, str) or not path.strip():
        raise ValidationError(f"Malformed project identity: {path!r}")

    candidate = path.strip().replace("\\", "/")
    if not (candidate.startswith("/") or _DRIVE_PATTERN.match(candidate)):
        candidate = os.path.abspath(candidate).replace("\\", "/")
    return posixpath.normpath(candidate)


def project_key(path: str) -> str:
    """Return the identity key for a project path (normalized, case-insensitive)."""
    return normalize_project_path(path).casefold()


@dataclass(frozen=True, eq=False)
class ProjectVertex:
    """A project in the dependency graph.

    Equality and hashing use the normalized build-file path only, so the same
    project loaded from two solutions collapses to one vertex.

    Attributes:
        path: Normalized absolute path to the project's build file
        name: Display name
        solution: Id of the solution the project was first seen in
        is_framework: True for framework/third-party projects (set by the framework filter)
    """

    path: str
    name: str
    solution: str
    is_framework: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_project_path(self.path))
        if not self.name:
            object.__setattr__(self, "name", posixpath.splitext(posixpath.basename(self.path))[0])

    @property
    def key(self) -> str:
        return self.path.casefold()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProjectVertex):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class DependencyEdge:
    """Directed dependency: source depends on target."""

    source: ProjectVertex
    target: ProjectVertex

    @property
    def is_cross_solution(self) -> bool:
        """True when the endpoints were tagged with different solutions. Never stored."""
        if not self.source.solution or not self.target.solution:
            return False
        return self.source.solution.casefold() != self.target.solution.casefold()

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target

    @property
    def sort_key(self) -> Tuple[str, str]:
        """Lexicographic edge identity used for deterministic tie-breaking."""
        return (self.source.path, self.target.path)

    def __str__(self) -> str:
        return f"{self.source.name} -> {self.target.name}"


class DependencyGraph:
    """Deduplicated vertex set and edge set for one or more solutions.

    Built once by the graph builder and frozen; read-only thereafter.
    """

    def __init__(self) -> None:
        self._graph: "nx.DiGraph[str]" = nx.DiGraph()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_vertex(self, vertex: ProjectVertex) -> bool:
        """Add a vertex. Returns False if a vertex with the same identity already exists."""
        if vertex is None:
            raise ValidationError("vertex must not be None")
        self._ensure_mutable()
        if vertex.key in self._graph:
            return False
        self._graph.add_node(vertex.key, vertex=vertex)
        return True

    def add_edge(self, source: ProjectVertex, target: ProjectVertex) -> bool:
        """Add a dependency edge between two existing vertices.

        Returns:
            False if the edge already exists

        Raises:
            GraphBuildError: If either endpoint is not a vertex of this graph
        """
        self._ensure_mutable()
        if source.key not in self._graph or target.key not in self._graph:
            raise GraphBuildError(f"Cannot add edge {source.name} -> {target.name}: endpoint not in graph")
        if self._graph.has_edge(source.key, target.key):
            return False
        edge = DependencyEdge(self.vertex(source.key), self.vertex(target.key))
        self._graph.add_edge(source.key, target.key, edge=edge)
        return True

    def freeze(self) -> "DependencyGraph":
        """Make the graph read-only. Further add_* calls raise GraphBuildError."""
        nx.freeze(self._graph)
        return self

    @property
    def is_frozen(self) -> bool:
        return nx.is_frozen(self._graph)

    def _ensure_mutable(self) -> None:
        if nx.is_frozen(self._graph):
            raise GraphBuildError("Dependency graph is read-only after building")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def vertex_count(self) -> int:
        return int(self._graph.number_of_nodes())

    @property
    def edge_count(self) -> int:
        return int(self._graph.number_of_edges())

    @property
    def vertices(self) -> List[ProjectVertex]:
        """All vertices in insertion order."""
        return [data for _, data in self._graph.nodes(data="vertex")]

    @property
    def edges(self) -> List[DependencyEdge]:
        """All edges, ordered by source insertion order then target insertion order."""
        return [data for _, _, data in self._graph.edges(data="edge")]

    def vertex_keys(self) -> Iterator[str]:
        return iter(self._graph.nodes())

    def vertex(self, key: str) -> ProjectVertex:
        """Return the vertex stored under an identity key."""
        vertex: ProjectVertex = self._graph.nodes[key]["vertex"]
        return vertex

    def find_vertex(self, path: str) -> Optional[ProjectVertex]:
        """Look up a vertex by (unnormalized) build-file path."""
        key = project_key(path)
        if key not in self._graph:
            return None
        return self.vertex(key)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, ProjectVertex):
            return item.key in self._graph
        if isinstance(item, str):
            return item in self._graph
        return False

    def __len__(self) -> int:
        return self.vertex_count

    def has_edge(self, source: ProjectVertex, target: ProjectVertex) -> bool:
        return bool(self._graph.has_edge(source.key, target.key))

    def get_edge(self, source: ProjectVertex, target: ProjectVertex) -> Optional[DependencyEdge]:
        if not self._graph.has_edge(source.key, target.key):
            return None
        edge: DependencyEdge = self._graph.edges[source.key, target.key]["edge"]
        return edge

    def successor_keys(self, key: str) -> Iterator[str]:
        """Identity keys of the projects that key depends on, in insertion order."""
        return iter(self._graph.successors(key))

    def successors(self, vertex: ProjectVertex) -> List[ProjectVertex]:
        return [self.vertex(k) for k in self._graph.successors(vertex.key)]

    def predecessors(self, vertex: ProjectVertex) -> List[ProjectVertex]:
        return [self.vertex(k) for k in self._graph.predecessors(vertex.key)]

    def out_edges(self, vertex: ProjectVertex) -> List[DependencyEdge]:
        return [data for _, _, data in self._graph.out_edges(vertex.key, data="edge")]

    def in_edges(self, vertex: ProjectVertex) -> List[DependencyEdge]:
        return [data for _, _, data in self._graph.in_edges(vertex.key, data="edge")]

    def out_degree(self, vertex: ProjectVertex) -> int:
        return int(self._graph.out_degree(vertex.key))

    def in_degree(self, vertex: ProjectVertex) -> int:
        return int(self._graph.in_degree(vertex.key))

    def cross_solution_edges(self) -> List[DependencyEdge]:
        return [edge for edge in self.edges if edge.is_cross_solution]

    def detect_orphaned_vertices(self) -> List[ProjectVertex]:
        """Vertices with neither incoming nor outgoing edges."""
        return [self.vertex(k) for k in self._graph.nodes() if self._graph.degree(k) == 0]

    def to_networkx(self) -> Any:
        """Read-only NetworkX view keyed by identity, for reporting and rendering layers."""
        return self._graph.copy(as_view=True)

    def __repr__(self) -> str:
        return f"DependencyGraph(vertices={self.vertex_count}, edges={self.edge_count})"
