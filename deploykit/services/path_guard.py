"""Path containment checks for user-supplied binary paths."""

from pathlib import Path
from typing import Union

from deploykit.exceptions import PathEscapeError

PathLike = Union[str, Path]


def resolve_within(base: PathLike, candidate: PathLike) -> Path:
    """
    Resolve ``candidate`` against ``base`` and require it to stay inside.

    Both paths are canonicalised (symlinks and ``..`` resolved). Containment
    is checked per path segment, so ``/srv/app-old`` is not inside ``/srv/app``.

    Args:
        base: Base directory
        candidate: Relative or absolute path

    Returns:
        Resolved absolute path of the candidate

    Raises:
        PathEscapeError: If the candidate resolves outside the base
    """
    base_resolved = Path(base).resolve()
    candidate_resolved = (base_resolved / Path(candidate)).resolve()

    if candidate_resolved != base_resolved and base_resolved not in candidate_resolved.parents:
        raise PathEscapeError(str(candidate), str(base_resolved))

    return candidate_resolved
