#!/usr/bin/env python3
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#*
#* Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
#*
#* 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
#* 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
#*    documentation and/or other materials provided with the distribution.
#* 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
#*    software without specific prior written permission.
#*
#* THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
#* THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
#* CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
#* PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
#* LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
#* EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#****************************************************************************************************************************************************
"""Pytest configuration and shared fixtures for depmap tests.

Projects are addressed by absolute POSIX paths (/src/<Name>/<Name>.csproj)
so identity keys do not depend on the working directory.

Fixture Complexity Levels:
- simple: 3-5 projects, one cycle
- multi-solution: two solutions sharing a project
"""

import sys
from pathlib import Path
from typing import Callable, Dict, Generator, Sequence, Tuple

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from depmap.color_utils import Colors
from depmap.graph_builder import SolutionDataset, SolutionProject, build_dependency_graph
from depmap.graph_model import DependencyGraph

ProjectSpec = Dict[str, Sequence[str]]


def project_path(name: str) -> str:
    return f"/src/{name}/{name}.csproj"


@pytest.fixture
def path_of() -> Callable[[str], str]:
    """Map a project name to its build-file path."""
    return project_path


@pytest.fixture
def make_solution() -> Callable[[str, ProjectSpec], SolutionDataset]:
    """Factory: solution id + {project name: [referenced project names]} -> SolutionDataset."""

    def _make(solution_id: str, projects: ProjectSpec) -> SolutionDataset:
        return SolutionDataset(
            solution_id=solution_id,
            projects=tuple(
                SolutionProject(path=project_path(name), name=name, references=tuple(project_path(ref) for ref in refs))
                for name, refs in projects.items()
            ),
        )

    return _make


@pytest.fixture
def make_graph(make_solution: Callable[[str, ProjectSpec], SolutionDataset]) -> Callable[[ProjectSpec], DependencyGraph]:
    """Factory: single-solution graph from {project name: [referenced project names]}."""

    def _make(projects: ProjectSpec) -> DependencyGraph:
        return build_dependency_graph([make_solution("Main", projects)])

    return _make


@pytest.fixture
def abc_cycle_graph(make_graph: Callable[[ProjectSpec], DependencyGraph]) -> DependencyGraph:
    """A -> B -> C -> A plus D -> A outside the cycle.

    Scope: function
    Complexity: simple
    """
    return make_graph({"A": ["B"], "B": ["C"], "C": ["A"], "D": ["A"]})


@pytest.fixture
def abc_call_counts() -> Dict[Tuple[str, str], int]:
    """Method call counts for the A -> B -> C -> A cycle: B -> C is the weakest link."""
    return {
        (project_path("A"), project_path("B")): 5,
        (project_path("B"), project_path("C")): 2,
        (project_path("C"), project_path("A")): 8,
    }


@pytest.fixture
def two_cycle_graph(make_graph: Callable[[ProjectSpec], DependencyGraph]) -> DependencyGraph:
    """Two independent cycles: X <-> Y and P -> Q -> R -> S -> P.

    Scope: function
    Complexity: simple
    """
    return make_graph({"X": ["Y"], "Y": ["X"], "P": ["Q"], "Q": ["R"], "R": ["S"], "S": ["P"]})



@pytest.fixture
def restore_colors() -> Generator[None, None, None]:
    """Undo Colors.disable() (e.g. from --no-color) after the test."""
    saved = {attr: getattr(Colors, attr) for attr in dir(Colors) if not attr.startswith("_") and attr != "disable"}
    yield
    for attr, value in saved.items():
        setattr(Colors, attr, value)
