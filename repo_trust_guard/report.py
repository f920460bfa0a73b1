"""
NDJSON records for scoring results.

Metric values are rounded to one decimal and latencies to three, so a record
reproduces a RepoDataResult only up to that rounding.
"""

import json
from pathlib import Path
from typing import Any

from repo_trust_guard.core import RepoDataResult

VALUE_DECIMALS = 1
LATENCY_DECIMALS = 3

# Record key -> RepoDataResult field, in output order
RECORD_FIELDS = {
    "URL": "url",
    "NetScore": "net_score",
    "NetScore_Latency": "net_score_latency",
    "RampUp": "ramp_up",
    "RampUp_Latency": "ramp_up_latency",
    "Correctness": "correctness",
    "Correctness_Latency": "correctness_latency",
    "BusFactor": "bus_factor",
    "BusFactor_Latency": "bus_factor_latency",
    "ResponsiveMaintainer": "responsive_maintainer",
    "ResponsiveMaintainer_Latency": "responsive_maintainer_latency",
    "License": "license",
    "License_Latency": "license_latency",
    "GoodPinningPractice": "good_pinning_practice",
    "GoodPinningPractice_Latency": "good_pinning_practice_latency",
    "PullRequest": "pull_request",
    "PullRequest_Latency": "pull_request_latency",
}


def format_result(result: RepoDataResult) -> dict[str, Any]:
    """Convert a result into its rounded record form."""
    record: dict[str, Any] = {}
    for key, field in RECORD_FIELDS.items():
        value = getattr(result, field)
        if key == "URL":
            record[key] = value
        elif key.endswith("_Latency"):
            record[key] = round(value, LATENCY_DECIMALS)
        else:
            record[key] = round(value, VALUE_DECIMALS)
    return record


def to_ndjson_line(result: RepoDataResult) -> str:
    """Serialize a result as one NDJSON line (without the newline)."""
    return json.dumps(format_result(result))


def parse_record(line: str) -> RepoDataResult:
    """
    Parse an NDJSON record back into a RepoDataResult.

    Raises:
        ValueError: If the line is not a complete record.
    """
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid result record: {e}") from e

    missing = [key for key in RECORD_FIELDS if key not in record]
    if missing:
        raise ValueError(f"Result record is missing keys: {', '.join(missing)}")

    values = {
        field: record[key] if key == "URL" else float(record[key])
        for key, field in RECORD_FIELDS.items()
    }
    return RepoDataResult(**values)


def append_record(output_path: Path, result: RepoDataResult) -> None:
    """Append one result record to an NDJSON file."""
    with open(output_path, "a", encoding="utf-8") as f:
        f.write(to_ndjson_line(result) + "\n")


def read_urls(url_file: Path) -> list[str]:
    """Read newline-delimited URLs, skipping blank lines."""
    with open(url_file, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]
