"""Command handler functions for CLI operations."""

import os
import tempfile
from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from common.types import Manifest
from cli.config import Config
from cli.constants import CONFIG_DIR_NAME
from cli.models import DeployCommand
from uploader.assets_client import AssetsClient
from uploader.cleanup import register_cleanup, unregister_cleanup
from uploader.exceptions import PagesDeployError
from uploader.pipeline import upload_directory

logger = get_logger(__name__)


def get_config() -> Config:
    """
    Load the user's configuration.

    Returns:
        Config instance backed by ~/.pages-deploy/config.json
    """
    return Config(Path.home() / CONFIG_DIR_NAME / 'config.json')


def create_client(cmd: DeployCommand, config: Config) -> AssetsClient:
    """
    Build an AssetsClient for the command's project.

    Raises:
        PagesDeployError: Account ID or API token is not configured
    """
    account_id = cmd.account_id or config.get_account_id()
    if not account_id:
        raise PagesDeployError("No account ID. Pass --account-id or set CLOUDFLARE_ACCOUNT_ID.")

    api_token = config.get_api_token()
    if not api_token:
        raise PagesDeployError("No API token. Set CLOUDFLARE_API_TOKEN.")

    if cmd.account_id and cmd.account_id != config.get_account_id():
        config.set_account_id(cmd.account_id)

    return AssetsClient(
        account_id=account_id,
        project_name=cmd.project_name,
        api_token=api_token,
        base_url=config.get_base_url(),
        timeout=config.get_timeout()
    )


class ManifestWriter:
    """
    Writes the manifest atomically to a target path.

    The temporary file is created before the upload starts, so an unwritable
    destination fails before any network work, and is removed on interrupt.
    """

    def __init__(self, target: Path):
        self.target = Path(target)
        self.temp_path: Optional[Path] = None

    def open(self) -> None:
        self.target.parent.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(
            dir=self.target.parent,
            prefix=f".{self.target.name}.",
            suffix=".tmp"
        )
        os.close(fd)
        self.temp_path = Path(name)
        register_cleanup(self.discard)

    def commit(self, manifest: Manifest) -> None:
        self.temp_path.write_text(manifest.to_json())
        os.replace(self.temp_path, self.target)
        self.temp_path = None
        unregister_cleanup(self.discard)
        logger.info(f"Manifest written to {self.target}")

    def discard(self) -> None:
        if self.temp_path is not None:
            self.temp_path.unlink(missing_ok=True)
            self.temp_path = None
        unregister_cleanup(self.discard)


async def handle_deploy(
    cmd: DeployCommand,
    config: Optional[Config] = None,
    client=None,
    progress_stream=None
) -> Manifest:
    """
    Handle the deploy command.

    Args:
        cmd: DeployCommand with directory and project
        config: Optional Config for dependency injection (testing)
        client: Optional assets client for dependency injection (testing)
        progress_stream: Optional stream for the progress line

    Returns:
        Manifest of the uploaded directory

    Raises:
        PagesDeployError: The deployment failed
    """
    logger.info(f"Executing deploy command: directory={cmd.directory} project={cmd.project_name}")
    if config is None:
        config = get_config()

    try:
        settings = config.get_upload_settings()
    except (TypeError, ValueError) as e:
        raise PagesDeployError(f"Invalid upload settings in {config.config_path}: {e}") from e

    writer = ManifestWriter(Path(cmd.output_manifest)) if cmd.output_manifest else None
    owns_client = client is None
    if owns_client:
        client = create_client(cmd, config)

    try:
        if writer is not None:
            writer.open()
        manifest = await upload_directory(
            cmd.directory,
            client,
            settings,
            progress_stream=progress_stream
        )
        if writer is not None:
            writer.commit(manifest)
    finally:
        if writer is not None:
            writer.discard()
        if owns_client:
            await client.close()

    logger.debug("Deploy command completed")
    return manifest
