"""CLI entry point."""

import asyncio
import os
import sys

from common.logging_config import setup_logging
from cli.commands import handle_deploy
from cli.constants import EXIT_INTERRUPTED, EXIT_USAGE, HELP_TEXT, RED, RESET
from cli.models import DeployCommand, HelpCommand
from cli.parser import ParseError, parse_command
from uploader.cleanup import install_signal_handlers, run_cleanup
from uploader.exceptions import PagesDeployError


async def _deploy(cmd: DeployCommand) -> None:
    install_signal_handlers(asyncio.current_task())
    manifest = await handle_deploy(cmd)
    if not cmd.output_manifest:
        print(manifest.to_json())


def main(argv: list[str] | None = None) -> int:
    """Entry point for CLI."""
    args = list(sys.argv[1:] if argv is None else argv)

    debug = '--debug' in args
    if debug:
        args.remove('--debug')
    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'INFO')

    logger = setup_logging('cli', log_level=log_level)
    if debug:
        logger.info("Debug logging enabled")

    try:
        cmd = parse_command(args)
    except ParseError as e:
        print(f"{RED}Error: {e}{RESET}\n\n{HELP_TEXT}", file=sys.stderr)
        return EXIT_USAGE

    if isinstance(cmd, HelpCommand):
        print(HELP_TEXT)
        return 0

    try:
        asyncio.run(_deploy(cmd))
    except (asyncio.CancelledError, KeyboardInterrupt):
        run_cleanup()
        logger.info("Deployment interrupted")
        return EXIT_INTERRUPTED
    except PagesDeployError as e:
        logger.debug("Deployment failed", exc_info=True)
        print(f"{RED}Error: {e.message}{RESET}", file=sys.stderr)
        return e.code if e.code and 0 < e.code < 256 else 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
