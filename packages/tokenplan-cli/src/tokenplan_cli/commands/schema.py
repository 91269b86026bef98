"""tokenplan schema command - Export JSON Schema."""

from __future__ import annotations

import click

from tokenplan_cli.output import success


@click.group()
def schema() -> None:
    """Manage JSON Schema for editors and execution engines.

    **Commands:**

    - `tokenplan schema export` - Export DistributionSpec (distribution.yaml) JSON Schema
    - `tokenplan schema export-artifacts` - Export DeploymentArtifacts JSON Schema
    """
    pass


@schema.command("export")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./schemas/distribution.schema.json",
    help="Output path [default: ./schemas/distribution.schema.json]",
)
def export_schema(output_path: str) -> None:
    """Export DistributionSpec JSON Schema.

    Examples:

        tokenplan schema export

        tokenplan schema export --output custom/path/schema.json
    """
    # Import here to avoid heavy imports at CLI startup
    from tokenplan_core import export_distribution_spec_schema

    from tokenplan_cli.errors import write_error

    try:
        export_distribution_spec_schema(output_path)
    except PermissionError as e:
        raise write_error(output_path) from e

    success(f"Schema exported to {output_path}")


@schema.command("export-artifacts")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./schemas/deployment-artifacts.schema.json",
    help="Output path [default: ./schemas/deployment-artifacts.schema.json]",
)
def export_artifacts_schema(output_path: str) -> None:
    """Export DeploymentArtifacts JSON Schema.

    Examples:

        tokenplan schema export-artifacts
    """
    from tokenplan_core import export_deployment_artifacts_schema

    from tokenplan_cli.errors import write_error

    try:
        export_deployment_artifacts_schema(output_path)
    except PermissionError as e:
        raise write_error(output_path) from e

    success(f"Artifacts schema exported to {output_path}")
