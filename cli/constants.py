"""CLI constants."""

RED = "\033[31m"
RESET = "\033[0m"

CONFIG_DIR_NAME = ".pages-deploy"

HELP_TEXT = """Usage: pages-deploy <directory> --project-name <name> [options]

Publish a directory of static assets.

Options:
  --project-name <name>       Project to deploy to (required)
  --account-id <id>           Account that owns the project (or CLOUDFLARE_ACCOUNT_ID)
  --output-manifest <path>    Write the path -> fingerprint manifest to a JSON file
  --debug                     Enable debug logging
  -h, --help                  Show this help

Environment:
  CLOUDFLARE_API_TOKEN        Account API token
  CLOUDFLARE_API_BASE_URL     API base URL override"""

EXIT_INTERRUPTED = 130
EXIT_USAGE = 2
