"""Unified diff helpers for placing review comments."""

HEADER_ADDED_PREFIX = "+++"


def resolve_position(patch: str | None) -> int | None:
    """Find the diff position of the first added line in a patch.

    GitHub's review comment API addresses lines by 'position': the 1-indexed
    line offset within the file's patch, where every line counts (hunk
    headers, context, additions and removals). Only lines inside the diff can
    be commented on, so a patch without added lines has no usable position.

    Args:
        patch: The unified diff patch content, or None for binary files.

    Returns:
        The 1-indexed position of the first ``+`` line that is not a ``+++``
        file header, or None if there is none.
    """
    if not patch:
        return None

    for position, line in enumerate(patch.split("\n"), start=1):
        if line.startswith("+") and not line.startswith(HEADER_ADDED_PREFIX):
            return position

    return None
