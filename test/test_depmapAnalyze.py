#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for the depmapAnalyze.py command line entry point."""

import json
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import patch

import pytest

import depmapAnalyze
from depmap.constants import EXIT_INVALID_ARGS, EXIT_RUNTIME_ERROR, EXIT_SUCCESS, AnalysisError


def _input_document() -> Dict[str, Any]:
    def project(name: str, refs: List[str], framework: str = "net8.0") -> Dict[str, Any]:
        return {
            "path": f"src/{name}/{name}.csproj",
            "name": name,
            "references": [f"src/{ref}/{ref}.csproj" for ref in refs],
            "targetFramework": framework,
            "complexity": {"methodCount": 20, "averageComplexity": 5.0},
            "externalEndpoints": 2,
        }

    return {
        "solutions": [
            {"id": "Main", "projects": [project("A", ["B"]), project("B", ["C"]), project("C", ["A"], "net472"), project("D", ["A"])]},
        ],
        "callCounts": [
            {"source": "src/A/A.csproj", "target": "src/B/B.csproj", "count": 5},
            {"source": "src/B/B.csproj", "target": "src/C/C.csproj", "count": 2},
            {"source": "src/C/C.csproj", "target": "src/A/A.csproj", "count": 8},
        ],
    }


@pytest.fixture
def input_file(tmp_path: Path) -> str:
    path = tmp_path / "analysis-input.json"
    path.write_text(json.dumps(_input_document()), encoding="utf-8")
    return str(path)


def _run(*args: str) -> int:
    with patch("sys.argv", ["depmapAnalyze.py", *args]):
        return depmapAnalyze.main()


@pytest.mark.integration
@pytest.mark.usefixtures("restore_colors")
class TestMain:
    """Tests for depmapAnalyze.main()."""

    def test_full_analysis(self, input_file: str, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        code = _run(input_file, "--config", str(tmp_path / "absent.json"), "--no-color")
        out = capsys.readouterr().out

        assert code == EXIT_SUCCESS
        assert "Analyzed 4 projects and 4 references" in out
        assert "Found 1 circular dependency chain(s)" in out
        assert "Weakest link in small 3-project cycle, just 2 method calls (weakest of 3 candidates)" in out
        assert "Easy" in out

    def test_cycles_only(self, input_file: str, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        code = _run(input_file, "--cycles-only", "--config", str(tmp_path / "absent.json"), "--no-color")
        out = capsys.readouterr().out
        assert code == EXIT_SUCCESS
        assert "Found 1 circular dependency chain(s)" in out
        assert "Projects scored" not in out

    def test_threaded(self, input_file: str, tmp_path: Path) -> None:
        assert _run(input_file, "--max-workers", "2", "--config", str(tmp_path / "absent.json"), "--no-color") == EXIT_SUCCESS

    def test_missing_input(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        assert _run(str(tmp_path / "absent.json"), "--no-color") == EXIT_INVALID_ARGS
        assert "Error:" in capsys.readouterr().err

    def test_invalid_config(self, input_file: str, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        config = tmp_path / "scoring-config.json"
        config.write_text(json.dumps({"ScoringWeights": {"Coupling": 0.9, "Complexity": 0.3, "TechDebt": 0.2, "ExternalExposure": 0.1}}))
        assert _run(input_file, "--config", str(config), "--no-color") == EXIT_INVALID_ARGS
        assert "sum to 1.0" in capsys.readouterr().err

    @pytest.mark.parametrize("option", [["--top", "0"], ["--max-workers", "0"]])
    def test_invalid_numbers(self, input_file: str, option: List[str]) -> None:
        assert _run(input_file, *option, "--no-color") == EXIT_INVALID_ARGS

    def test_analysis_error_exit_code(self, input_file: str, tmp_path: Path) -> None:
        with patch("depmapAnalyze.run_analysis", side_effect=AnalysisError("boom")):
            assert _run(input_file, "--config", str(tmp_path / "absent.json"), "--no-color") == EXIT_RUNTIME_ERROR
