"""tokenplan compile command - Generate the deployment plan.

Runs the full compiler and writes DeploymentArtifacts as JSON.
"""

from __future__ import annotations

from pathlib import Path

import click

from tokenplan_cli.loader import file_option, load_distribution, preset_option
from tokenplan_cli.output import success, warning

PLAN_FILE_NAME = "deployment_plan.json"


@click.command("compile")
@file_option
@preset_option
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default=".tokenplan/",
    help="Output directory [default: .tokenplan/]",
)
@click.option(
    "--mode",
    "mode",
    type=click.Choice(["development", "production"]),
    default=None,
    help="Build mode [default: $TOKENPLAN_BUILD_MODE or development]",
)
def compile_cmd(
    file_path: str | None,
    preset: str | None,
    output_path: str,
    mode: str | None,
) -> None:
    """Generate the deployment plan for a distribution.

    Compiles the distribution into ordered contract creations and calls
    for the execution engine. Development mode deploys a test payment
    asset; production mode binds $TOKENPLAN_PAYMENT_ASSET_ADDRESS.

    Examples:

        tokenplan compile

        tokenplan compile --preset squiggle --mode production

        tokenplan compile --output build/plan/
    """
    spec = load_distribution(file_path, preset)
    output = Path(output_path)

    # Import here to avoid heavy imports at CLI startup
    from tokenplan_core import Compiler, TokenplanError

    from tokenplan_cli.errors import compilation_error, write_error

    try:
        artifacts = Compiler(build_mode=mode).compile(spec)
    except TokenplanError as e:
        raise compilation_error(e, "Compilation") from e

    plan_path = output / PLAN_FILE_NAME
    try:
        output.mkdir(parents=True, exist_ok=True)
        if plan_path.exists():
            warning(f"Overwriting {plan_path}")
        plan_path.write_text(artifacts.model_dump_json(indent=2))
    except PermissionError as e:
        raise write_error(output_path) from e

    success(f"Compiled {len(artifacts.plan.actions)} actions to {plan_path}")
