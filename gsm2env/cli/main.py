"""CLI entrypoint for gsm2env."""
import sys
import argparse
import logging
from pathlib import Path

import yaml

from gsm2env import __version__
from .validators import validate_output_path, validate_secret_name

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMAT = "env"
OUTPUT_FORMATS = ["stdout", "json", "env", "yaml", "csv"]

FILE_LABELS = {
    "json": "JSON file",
    "env": ".env file",
    "yaml": "YAML file",
    "csv": "CSV file",
}


def cmd_version(args):
    """Show version information."""
    print(f"gsm2env {__version__}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from gsm2env.secrets.domains.preferences import CONFIG_PATH, set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference(CONFIG_PATH, str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_set_format(args):
    """Set the default output format preference."""
    from gsm2env.secrets.domains.preferences import OUTPUT_FORMAT, set_preference

    set_preference(OUTPUT_FORMAT, args.format)
    print(f"Default output format set to: {args.format}")


def cmd_config_show(args):
    """Show current config file path and default output format."""
    from gsm2env.secrets.domains.config_loader import configured_output_format, default_config_path
    from gsm2env.secrets.domains.preferences import CONFIG_PATH, OUTPUT_FORMAT, get_preference

    config_path_pref = get_preference(CONFIG_PATH)

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found)")

    output_format = get_preference(OUTPUT_FORMAT)
    if output_format:
        print(f"Default output format: {output_format} (preference)")
    else:
        config_format = configured_output_format()
        if config_format:
            print(f"Default output format: {config_format} (config)")
        else:
            print(f"Default output format: {DEFAULT_OUTPUT_FORMAT}")


def cmd_config_clear(args):
    """Clear config path and output format preferences."""
    from gsm2env.secrets.domains.config_loader import default_config_path
    from gsm2env.secrets.domains.preferences import CONFIG_PATH, OUTPUT_FORMAT, clear_preference

    clear_preference(CONFIG_PATH)
    clear_preference(OUTPUT_FORMAT)
    print(f"Preferences cleared. Will use default config: {default_config_path()}")


def cmd_config_init(args):
    """Interactive config setup."""
    from gsm2env.secrets.domains.config_loader import default_config_path

    default_config = default_config_path()

    print("=== gsm2env Configuration Setup ===\n")

    if default_config.exists():
        print(f"Configuration file already exists at: {default_config}")
        response = input("Overwrite it? (y/N): ").strip().lower()
        if response != 'y':
            print(f"\nKeeping existing config at: {default_config}")
            return

    project_id = input("GCP project ID: ").strip()
    if not project_id:
        print("Error: Project ID cannot be empty", file=sys.stderr)
        sys.exit(2)

    key_path = input("Service account key file (leave empty for Application Default Credentials): ").strip()
    if key_path:
        key_file = Path(key_path).expanduser().resolve()
        if not key_file.is_file():
            print(f"Error: File not found: {key_file}", file=sys.stderr)
            sys.exit(1)
        authentication = {"type": "service_account", "service_account_path": str(key_file)}
    else:
        authentication = {"type": "application_default"}

    output_format = input(f"Default output format [{DEFAULT_OUTPUT_FORMAT}]: ").strip() or DEFAULT_OUTPUT_FORMAT
    if output_format not in OUTPUT_FORMATS:
        print(f"Error: Unknown output format '{output_format}'", file=sys.stderr)
        sys.exit(2)

    config = {
        "authentication": authentication,
        "gcp": {"project_id": project_id},
        "output": {"format": output_format},
    }
    default_config.parent.mkdir(parents=True, exist_ok=True)
    with open(default_config, 'w') as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
    print(f"\nConfig written to: {default_config}")


def _resolve_output_format(requested):
    """Format from --output, else preference, else config file, else env."""
    if requested:
        return requested

    from gsm2env.secrets.domains.config_loader import configured_output_format
    from gsm2env.secrets.domains.preferences import OUTPUT_FORMAT, get_preference

    preferred = get_preference(OUTPUT_FORMAT)
    if preferred in OUTPUT_FORMATS:
        return preferred
    return configured_output_format() or DEFAULT_OUTPUT_FORMAT


def _confirmation(result, output_format):
    """Line reporting where a secret was written, or None for console output."""
    from gsm2env.secrets.domains.models import Binary
    from gsm2env.secrets.domains.output_router import CONSOLE

    if result.destination == CONSOLE:
        return None

    if output_format == "stdout":
        if isinstance(result.value, Binary):
            return f"Binary secret ({result.value.size} bytes) written to file: {result.destination}"
        return f"Secret written to file: {result.destination}"

    return f"{FILE_LABELS[output_format]} created successfully at {result.destination}"


def cmd_secrets_get(args):
    """Fetch a secret and render it in the requested format."""
    from gsm2env.secrets.workflows.secret_operations import get_secret

    validate_secret_name(args.secret_name)
    if args.file:
        validate_output_path(args.file)
    if args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    output_format = _resolve_output_format(args.output)
    result = get_secret(
        args.secret_name,
        output_format,
        explicit_path=args.file,
        project_id=args.project_id,
        version=args.version,
    )

    message = _confirmation(result, output_format)
    if message and not args.quiet:
        print(message)


def cmd_secrets_list(args):
    """List secret names, optionally filtered."""
    from gsm2env.secrets.workflows.secret_operations import list_secrets

    names = list_secrets(args.filter, project_id=args.project_id)

    if not names:
        print("No secrets found.")
        return

    print("Available secrets:")
    for name in names:
        print(f"- {name}")
    print(f"\nTotal: {len(names)} secrets")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="gsm2env",
        description="gsm2env - fetch GCP Secret Manager secrets and save them as .env, JSON, YAML or CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (authentication, network, secret not found, write failure, etc.)
  2 - Usage error (invalid arguments, invalid secret name format, etc.)

Environment variables:
  GCP_PROJECT - GCP project ID (overrides config file)

Configuration:
  Default location: ~/.config/gsm2env/config.yml
  Custom path: Set with 'gsm2env config set-path <path>'
  View current: Run 'gsm2env config show'
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of gsm2env"
    )

    get_parser = subparsers.add_parser(
        "get",
        help="Fetch a secret and save it as .env, JSON, YAML or CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Fetch a secret from GCP Secret Manager and render it.

JSON object secrets become KEY=VALUE entries; anything else is treated as
plain text, and payloads that are not UTF-8 as binary.

Destinations:
  --file PATH      write to PATH (with -o stdout: the unformatted secret)
  -o stdout        print to the console
  otherwise        .env, secret.json, secret.yaml or secret.csv in the
                   current directory
        """
    )
    get_parser.add_argument(
        "secret_name",
        help="Name of the secret (format: [a-zA-Z0-9_-]+)"
    )
    get_parser.add_argument(
        "-o", "--output",
        choices=OUTPUT_FORMATS,
        help=f"Output format (default: preference, config file, or '{DEFAULT_OUTPUT_FORMAT}')"
    )
    get_parser.add_argument(
        "-f", "--file",
        help="Write the output to this file instead of the default location"
    )
    get_parser.add_argument(
        "--project-id",
        help="GCP project ID (auto-detected from GCP_PROJECT env var or config file if not provided)"
    )
    get_parser.add_argument(
        "--version",
        default="latest",
        help="Secret version number or alias (default: latest)"
    )
    get_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress confirmation messages and warnings"
    )

    list_parser = subparsers.add_parser(
        "list",
        help="List available secrets",
        description="List secret names in the project, sorted alphabetically"
    )
    list_parser.add_argument(
        "-f", "--filter",
        help="Only show secrets whose name contains this text"
    )
    list_parser.add_argument(
        "--project-id",
        help="GCP project ID (auto-detected from GCP_PROJECT env var or config file if not provided)"
    )

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage gsm2env configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to your config file in ~/.config/gsm2env/preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")

    config_set_format_parser = config_subparsers.add_parser(
        "set-format",
        help="Set default output format",
        description="Store the output format used by 'gsm2env get' when -o is not given"
    )
    config_set_format_parser.add_argument("format", choices=OUTPUT_FORMATS, help="Output format")

    config_subparsers.add_parser(
        "show",
        help="Show current config path and default format",
        description="Display the configuration file path, its source and the default output format"
    )
    config_subparsers.add_parser(
        "clear",
        help="Clear preferences",
        description="Remove the config path and output format preferences"
    )
    config_subparsers.add_parser(
        "init",
        help="Interactive config setup",
        description="Write ~/.config/gsm2env/config.yml from a few prompts"
    )

    return parser, config_parser


CONFIG_COMMANDS = {
    "set-path": cmd_config_set_path,
    "set-format": cmd_config_set_format,
    "show": cmd_config_show,
    "clear": cmd_config_clear,
    "init": cmd_config_init,
}


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (authentication, network, secret not found, write failure, etc.)
        2 - Usage errors (invalid arguments, invalid secret name format, etc.)
    """
    parser, config_parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "get":
            cmd_secrets_get(args)
        elif args.command == "list":
            cmd_secrets_list(args)
        elif args.command == "config":
            handler = CONFIG_COMMANDS.get(args.config_command)
            if handler is None:
                config_parser.print_help()
                sys.exit(2)
            handler(args)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
