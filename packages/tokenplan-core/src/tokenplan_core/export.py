"""JSON Schema export functions for tokenplan-core.

This module provides functions to export JSON Schema Draft 2020-12 schemas
from Pydantic models for editor validation of distribution.yaml and for
execution engines that consume deployment plans in other languages.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from tokenplan_core.compiler.models import DeploymentArtifacts
from tokenplan_core.schemas import DistributionSpec

JSON_SCHEMA_DRAFT = "https://json-schema.org/draft/2020-12/schema"
SCHEMA_BASE_URL = "https://tokenplan.dev/schemas"


def export_distribution_spec_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export DistributionSpec JSON Schema for editor autocomplete.

    Args:
        output_path: Optional path to write schema file. If provided,
            creates parent directories as needed.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> schema = export_distribution_spec_schema()
        >>> schema["$schema"]
        'https://json-schema.org/draft/2020-12/schema'

        >>> # Export to file
        >>> export_distribution_spec_schema(Path("schemas/distribution-spec.schema.json"))
    """
    return _export(DistributionSpec, "distribution-spec.schema.json", output_path)


def export_deployment_artifacts_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export DeploymentArtifacts JSON Schema for execution engines.

    Args:
        output_path: Optional path to write schema file.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> schema = export_deployment_artifacts_schema()
        >>> schema["title"]
        'DeploymentArtifacts'
    """
    return _export(DeploymentArtifacts, "deployment-artifacts.schema.json", output_path)


def _export(
    model: type[BaseModel],
    file_name: str,
    output_path: Path | str | None,
) -> dict[str, Any]:
    schema = model.model_json_schema()

    # Add JSON Schema Draft 2020-12 metadata
    schema["$schema"] = JSON_SCHEMA_DRAFT
    schema["$id"] = f"{SCHEMA_BASE_URL}/{file_name}"

    # Ensure additionalProperties is set at root level
    if "additionalProperties" not in schema:
        schema["additionalProperties"] = False

    if output_path is not None:
        _write_schema_file(schema, output_path)

    return schema


def _write_schema_file(schema: dict[str, Any], path: Path | str) -> None:
    """Write schema to JSON file, creating parent directories."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(schema, indent=2))
