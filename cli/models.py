"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class DeployCommand:
    """Upload a directory of static assets to a project."""

    directory: str
    project_name: str
    account_id: str | None = None
    output_manifest: str | None = None
    command: Literal["deploy"] = "deploy"


@dataclass(frozen=True)
class HelpCommand:
    """Show usage."""

    command: Literal["help"] = "help"


CommandRequest = DeployCommand | HelpCommand
