"""Clone-or-update of the override repository using GitPython."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import git

from ..errors import CheckoutError

logger = logging.getLogger(__name__)

_GIT_ERRORS = (git.GitCommandError, git.InvalidGitRepositoryError, git.NoSuchPathError)


def ensure_checkout(
    remote: str,
    checkout_path: Path,
    *,
    branch: str,
    on_clone: Optional[Callable[[], None]] = None,
    on_update: Optional[Callable[[], None]] = None,
    force_update: bool = False,
    offline: bool = False,
    prefer_offline: bool = False,
) -> Path:
    """Make sure ``checkout_path`` holds ``branch`` of ``remote`` and return it.

    An existing checkout is reused untouched when running offline, or when
    offline is preferred and no update is forced. A missing checkout cannot
    be created offline.
    """
    checkout_path = Path(checkout_path)
    if checkout_path.exists():
        if offline or (prefer_offline and not force_update):
            logger.debug("Using existing checkout %s without update", checkout_path)
            return checkout_path
        if on_update:
            on_update()
        try:
            _update(checkout_path, branch)
        except _GIT_ERRORS as exc:
            raise CheckoutError(f"Unable to update {checkout_path} from {remote}: {exc}") from exc
        return checkout_path

    if offline:
        raise CheckoutError(f"No checkout of {remote} at {checkout_path} and running offline")
    if on_clone:
        on_clone()
    checkout_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        git.Repo.clone_from(remote, checkout_path, branch=branch, depth=1)
    except _GIT_ERRORS as exc:
        raise CheckoutError(f"Unable to clone {remote} (branch {branch}): {exc}") from exc
    return checkout_path


def _update(checkout_path: Path, branch: str) -> None:
    repo = git.Repo(checkout_path)
    repo.remotes.origin.fetch(branch)
    repo.git.checkout("-B", branch, f"origin/{branch}")
    repo.git.reset("--hard", f"origin/{branch}")
