#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for depmap.scoring_config."""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from depmap.constants import ConfigurationError, ValidationError
from depmap.framework_filter import DEFAULT_BLOCK_LIST
from depmap.scoring_config import ScoringConfig, ScoringWeights, load_scoring_config, parse_scoring_config


def _write(tmp_path: Path, data: Any) -> str:
    path = tmp_path / "scoring-config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


WEIGHTS: Dict[str, float] = {"Coupling": 0.25, "Complexity": 0.25, "TechDebt": 0.25, "ExternalExposure": 0.25}


@pytest.mark.unit
class TestScoringWeights:
    """Tests for ScoringWeights validation."""

    def test_defaults_are_valid(self) -> None:
        weights = ScoringWeights().validate()
        assert weights.as_dict() == {"Coupling": 0.40, "Complexity": 0.30, "TechDebt": 0.20, "ExternalExposure": 0.10}
        assert weights.total == pytest.approx(1.0)

    def test_sum_within_tolerance(self) -> None:
        ScoringWeights(0.40, 0.30, 0.20, 0.105).validate()

    @pytest.mark.parametrize(
        "weights",
        [
            ScoringWeights(0.5, 0.5, 0.5, 0.5),
            ScoringWeights(0.1, 0.1, 0.1, 0.1),
            ScoringWeights(1.2, -0.1, -0.1, 0.0),
            ScoringWeights("0.4", 0.3, 0.2, 0.1),  # type: ignore[arg-type]
        ],
    )
    def test_invalid(self, weights: ScoringWeights) -> None:
        with pytest.raises(ConfigurationError):
            weights.validate()

    def test_configuration_error_is_validation_error(self) -> None:
        """Invalid configuration maps onto the invalid-arguments exit code."""
        assert issubclass(ConfigurationError, ValidationError)


@pytest.mark.unit
class TestParseScoringConfig:
    """Tests for parse_scoring_config()."""

    def test_empty_document_uses_defaults(self) -> None:
        assert parse_scoring_config({}) == ScoringConfig()

    def test_full_document(self) -> None:
        config = parse_scoring_config(
            {
                "ScoringWeights": WEIGHTS,
                "Filter": {"BlockList": ["Contoso.*"], "AllowList": ["Contoso.Core"]},
                "MaxWorkers": 4,
            }
        )
        assert config.weights == ScoringWeights(0.25, 0.25, 0.25, 0.25)
        assert config.filter.block_list == ("Contoso.*",)
        assert config.filter.allow_list == ("Contoso.Core",)
        assert config.max_workers == 4

    def test_filter_defaults(self) -> None:
        config = parse_scoring_config({"Filter": {"AllowList": ["Microsoft.Internal.*"]}})
        assert config.filter.block_list == DEFAULT_BLOCK_LIST

    @pytest.mark.parametrize(
        "data",
        [
            {"ScoringWeights": {"Coupling": 1.0}},
            {"ScoringWeights": dict(WEIGHTS, Popularity=0.0)},
            {"ScoringWeights": [0.4, 0.3, 0.2, 0.1]},
            {"Filter": {"BlockList": "Microsoft.*"}},
            {"Filter": {"BlockList": [""]}},
            {"MaxWorkers": 0},
            {"MaxWorkers": True},
            [],
        ],
    )
    def test_invalid_documents(self, data: Any) -> None:
        with pytest.raises(ConfigurationError):
            parse_scoring_config(data)


@pytest.mark.unit
class TestLoadScoringConfig:
    """Tests for load_scoring_config()."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        assert load_scoring_config(str(tmp_path / "absent.json")) == ScoringConfig()
        assert load_scoring_config(None) == ScoringConfig()

    def test_load(self, tmp_path: Path) -> None:
        config = load_scoring_config(_write(tmp_path, {"ScoringWeights": WEIGHTS}))
        assert config.weights.coupling == 0.25

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "scoring-config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_scoring_config(str(path))

    def test_bad_weights_in_file(self, tmp_path: Path) -> None:
        bad = dict(WEIGHTS, Coupling=0.9)
        with pytest.raises(ConfigurationError, match="sum to 1.0"):
            load_scoring_config(_write(tmp_path, {"ScoringWeights": bad}))
