from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from carematch.cli import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")


def dataset_payload() -> dict:
    return {
        "clients": [
            {
                "client_id": "C-001",
                "name": "Jordan Lee",
                "conditions": ["orthopedics"],
                "insurance": "Cigna",
            }
        ],
        "providers": [
            {
                "provider_id": "PT-A",
                "name": "Harbor Physical Therapy",
                "service_types": ["physical_therapy"],
                "specializations": ["Orthopedics"],
                "insurance_accepted": ["Aetna", "Cigna"],
                "average_rating": 4.6,
                "review_count": 58,
            },
            {
                "provider_id": "PT-B",
                "name": "Uptown Rehab",
                "service_types": ["physical_therapy"],
                "insurance_accepted": ["Cigna"],
                "average_rating": 4.9,
                "review_count": 120,
            },
        ],
        "coverage_areas": [
            {
                "id": "CA-A",
                "provider_id": "PT-A",
                "center": {"latitude": 40.04, "longitude": -74.0},
                "radius_miles": 12,
                "postal_codes": ["07001"],
            },
            {
                "id": "CA-B",
                "provider_id": "PT-B",
                "center": {"latitude": 40.5, "longitude": -74.0},
                "radius_miles": 5,
            },
        ],
        "slots": [],
    }


def criteria_payload() -> dict:
    return {
        "client_id": "C-001",
        "service_types": ["physical_therapy"],
        "location": {"latitude": 40.0, "longitude": -74.0},
        "radius_miles": 10,
        "insurance": "Cigna",
    }


def test_cli_match_writes_ranked_output(tmp_path: Path, runner: CliRunner) -> None:
    dataset_path = tmp_path / "dataset.json"
    criteria_path = tmp_path / "criteria.json"
    output_path = tmp_path / "out" / "matches.json"
    write_json(dataset_path, dataset_payload())
    write_json(criteria_path, criteria_payload())

    result = runner.invoke(
        app,
        [
            "match",
            "--dataset",
            str(dataset_path),
            "--criteria",
            str(criteria_path),
            "--output",
            str(output_path),
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert "Matched 1 providers" in result.stdout
    assert output_path.exists()

    rendered = json.loads(output_path.read_text(encoding="utf-8"))
    assert rendered["metadata"]["client_id"] == "C-001"
    assert rendered["metadata"]["match_count"] == 1
    assert rendered["metadata"]["service_types"] == ["physical_therapy"]

    match = rendered["matches"][0]
    assert match["provider"]["provider_id"] == "PT-A"
    assert 0.0 <= match["compatibility_score"] <= 1.0
    assert match["distance_miles"] == pytest.approx(2.76, abs=0.05)
    assert match["confidence"] is None
    names = [factor["name"] for factor in match["match_factors"]]
    assert names == [
        "serviceMatch",
        "locationProximity",
        "specializationMatch",
        "experience",
        "insuranceCompatibility",
    ]


def test_cli_match_applies_yaml_weights(tmp_path: Path, runner: CliRunner) -> None:
    dataset_path = tmp_path / "dataset.json"
    criteria_path = tmp_path / "criteria.json"
    output_path = tmp_path / "matches.json"
    config_path = tmp_path / "config.yaml"
    write_json(dataset_path, dataset_payload())
    write_json(criteria_path, criteria_payload())
    config_path.write_text("scoring:\n  weights:\n    experience: 0.9\n", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "match",
            "--dataset",
            str(dataset_path),
            "--criteria",
            str(criteria_path),
            "--output",
            str(output_path),
            "--config",
            str(config_path),
        ],
    )

    assert result.exit_code == 0, result.stdout
    factors = json.loads(output_path.read_text(encoding="utf-8"))["matches"][0]["match_factors"]
    assert {factor["name"]: factor["weight"] for factor in factors}["experience"] == 0.9


def test_cli_match_reports_unknown_client(tmp_path: Path, runner: CliRunner) -> None:
    dataset_path = tmp_path / "dataset.json"
    criteria_path = tmp_path / "criteria.json"
    write_json(dataset_path, dataset_payload())
    write_json(criteria_path, {**criteria_payload(), "client_id": "C-404"})

    result = runner.invoke(
        app,
        [
            "match",
            "--dataset",
            str(dataset_path),
            "--criteria",
            str(criteria_path),
            "--output",
            str(tmp_path / "matches.json"),
        ],
    )

    assert result.exit_code == 1
    assert not (tmp_path / "matches.json").exists()


def test_cli_rejects_non_mapping_config(tmp_path: Path, runner: CliRunner) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- just\n- a list\n", encoding="utf-8")

    result = runner.invoke(app, ["factors", "--config", str(config_path)])

    assert result.exit_code == 2
    assert "YAML object" in result.output


def test_cli_factors_prints_catalog(runner: CliRunner) -> None:
    result = runner.invoke(app, ["factors"])

    assert result.exit_code == 0, result.stdout
    catalog = json.loads(result.stdout)
    assert [entry["name"] for entry in catalog][0] == "serviceMatch"
    assert catalog[0]["weight"] == 0.8
