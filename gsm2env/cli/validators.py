"""Input validation for CLI arguments."""
import os
import re
import sys

SECRET_NAME_PATTERN = r'^[a-zA-Z0-9_-]+$'
SECRET_NAME_MAX_LENGTH = 255


def validate_secret_name(name: str) -> None:
    """
    Validate secret name matches GCP requirements.

    GCP Secret Manager allows only [a-zA-Z0-9_-], up to 255 characters.

    Args:
        name: Secret name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        print("Error: Secret name cannot be empty", file=sys.stderr)
        print("\nSecret names must match: [a-zA-Z0-9_-]", file=sys.stderr)
        sys.exit(2)

    if len(name) > SECRET_NAME_MAX_LENGTH:
        print(f"Error: Secret name is longer than {SECRET_NAME_MAX_LENGTH} characters", file=sys.stderr)
        sys.exit(2)

    if not re.match(SECRET_NAME_PATTERN, name):
        print(f"Error: Invalid secret name '{name}'", file=sys.stderr)
        print("\nAllowed characters: letters, numbers, underscores (_), hyphens (-)", file=sys.stderr)
        print("Not allowed: dots (.), slashes (/), spaces, special characters (@, $, !, etc.)", file=sys.stderr)
        print("\nExamples of valid names:", file=sys.stderr)
        print("  ✓ DB_CONFIG", file=sys.stderr)
        print("  ✓ api-key-prod", file=sys.stderr)
        print("\nExamples of invalid names:", file=sys.stderr)
        print("  ✗ prod/db (contains slash)", file=sys.stderr)
        print("  ✗ MY SECRET (contains space)", file=sys.stderr)
        sys.exit(2)


def validate_output_path(path: str) -> None:
    """
    Validate that --file names something that can be overwritten as a file.

    Raises:
        SystemExit with code 2 if the path is an existing directory
    """
    if os.path.isdir(path):
        print(f"Error: Output path is a directory: {path}", file=sys.stderr)
        print("\nPass a file path to --file, e.g. --file ./config/.env", file=sys.stderr)
        sys.exit(2)
