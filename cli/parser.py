"""Command parser for CLI arguments."""

from cli.models import CommandRequest, DeployCommand, HelpCommand


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


OPTIONS = {
    "--project-name": "project_name",
    "--account-id": "account_id",
    "--output-manifest": "output_manifest",
}


def parse_command(args: list[str]) -> CommandRequest:
    """Parse command-line arguments into a CommandRequest object.

    Args:
        args: Arguments after the program name

    Returns:
        DeployCommand, or HelpCommand when help was requested

    Raises:
        ParseError: If arguments are missing, unknown or repeated
    """
    if not args or "-h" in args or "--help" in args or args == ["help"]:
        return HelpCommand()

    values: dict[str, str] = {}
    positional: list[str] = []

    tokens = iter(args)
    for token in tokens:
        if not token.startswith("--"):
            positional.append(token)
            continue

        name, sep, value = token.partition("=")
        if name not in OPTIONS:
            raise ParseError(f"Unknown option: {name}")
        if not sep:
            value = next(tokens, None)
            if value is None or value.startswith("--"):
                raise ParseError(f"{name} requires a value")
        if not value:
            raise ParseError(f"{name} requires a value")

        field = OPTIONS[name]
        if field in values:
            raise ParseError(f"{name} given more than once")
        values[field] = value

    if len(positional) != 1:
        raise ParseError("Exactly one directory must be given")
    if "project_name" not in values:
        raise ParseError("--project-name is required")

    return DeployCommand(directory=positional[0], **values)
