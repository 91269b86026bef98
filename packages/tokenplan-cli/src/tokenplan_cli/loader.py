"""Distribution loading shared by tokenplan-cli commands.

Commands take a distribution either from ``--file`` (distribution.yaml)
or from ``--preset`` (a distribution built into tokenplan-core).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tokenplan_cli.errors import CLIError, distribution_error

if TYPE_CHECKING:
    from tokenplan_core import DistributionSpec

DEFAULT_DISTRIBUTION_FILE = "./distribution.yaml"

file_option = click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default=None,
    help=f"Path to distribution.yaml [default: {DEFAULT_DISTRIBUTION_FILE}]",
)

preset_option = click.option(
    "--preset",
    "preset",
    type=str,
    default=None,
    help="Use a built-in distribution (e.g. squiggle) instead of a file",
)


def load_distribution(file_path: str | None, preset: str | None) -> DistributionSpec:
    """Load the distribution named on the command line.

    Raises:
        CLIError: If both sources are given, the preset is unknown, the file
            is missing, or the file is not a valid distribution.
    """
    # Import here to avoid heavy imports at CLI startup
    import yaml
    from pydantic import ValidationError as PydanticValidationError

    from tokenplan_core import DistributionSpec
    from tokenplan_core.presets import PRESETS

    if preset is not None:
        if file_path is not None:
            raise CLIError("Use either --file or --preset, not both")
        if preset not in PRESETS:
            raise CLIError(
                f"Unknown preset '{preset}'. Available presets: {', '.join(sorted(PRESETS))}"
            )
        return PRESETS[preset]()

    path = file_path or DEFAULT_DISTRIBUTION_FILE
    try:
        return DistributionSpec.from_yaml(path)
    except (FileNotFoundError, yaml.YAMLError, PydanticValidationError) as e:
        raise distribution_error(e, path) from e
