"""
Input validation for update targets.

Repository identifiers and branch names end up on a ``git`` command line
and in archive URLs, so they are checked before anything is fetched.
"""

import re

# ---------------------------------------------------------------------------
# Error message formatting helpers
# ---------------------------------------------------------------------------


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Branch name")
        reason: Description of validation failure (e.g., "cannot be empty")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


_BRANCH_FORBIDDEN = re.compile(r"[\s~^:?*\[\\]|\.\.|@\{|//")


def validate_repository(repository: str) -> tuple[bool, str]:
    """
    Validate a repository identifier.

    Args:
        repository: ``owner/name``, a clone URL or a local path

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Cannot start with '-' (would be read as a git option)
        - Cannot contain whitespace or control characters
    """
    if not repository or not repository.strip():
        return (
            False,
            format_validation_error("Repository", "cannot be empty"),
        )

    if repository.startswith("-"):
        return (
            False,
            format_validation_error("Repository", "cannot start with '-'"),
        )

    if any(ch.isspace() or ord(ch) < 32 for ch in repository):
        return (
            False,
            format_validation_error(
                "Repository", "cannot contain whitespace or control characters"
            ),
        )

    return (True, "")


def validate_branch_name(branch: str) -> tuple[bool, str]:
    """
    Validate a branch name against git's ref-name rules.

    Args:
        branch: The branch name to validate

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.

    Validation rules:
        - Cannot be empty
        - Cannot start with '-' or '/', or end with '/', '.' or '.lock'
        - Cannot contain whitespace, '..', '//', '@{' or any of ~^:?*[\\
    """
    if not branch or not branch.strip():
        return (
            False,
            format_validation_error("Branch name", "cannot be empty"),
        )

    if branch.startswith(("-", "/")):
        return (
            False,
            format_validation_error("Branch name", "cannot start with '-' or '/'"),
        )

    if branch.endswith(("/", ".", ".lock")):
        return (
            False,
            format_validation_error(
                "Branch name", "cannot end with '/', '.' or '.lock'"
            ),
        )

    if _BRANCH_FORBIDDEN.search(branch):
        return (
            False,
            format_validation_error(
                "Branch name", "contains characters git does not allow"
            ),
        )

    return (True, "")
