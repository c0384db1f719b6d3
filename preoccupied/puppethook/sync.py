"""
Branch working copy synchronization for the puppethook application.

Whether a branch has been seen before is decided purely by the
existence of its working copy directory under the base path.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import asyncio
import logging
import os
import subprocess
from contextlib import asynccontextmanager
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel

from .errors import SyncAction, SyncFailed
from .git import GitOperations


logger = logging.getLogger(__name__)


VCS_ERRORS = (subprocess.CalledProcessError, OSError)


# One lock per branch name, so that events for the same branch never
# interleave their existence check and git operations. A lock is
# dropped once no event is holding or waiting on it.
_branch_locks: Dict[str, asyncio.Lock] = {}
_branch_users: Dict[str, int] = {}


@asynccontextmanager
async def branch_lock(branch: str):
    lock = _branch_locks.setdefault(branch, asyncio.Lock())
    _branch_users[branch] = _branch_users.get(branch, 0) + 1

    try:
        async with lock:
            yield

    finally:
        _branch_users[branch] -= 1
        if not _branch_users[branch]:
            del _branch_users[branch]
            del _branch_locks[branch]


class Disposition(Enum):
    IGNORE = 'ignore'
    DELETED = 'deleted'
    CHANGED = 'changed'


class RepositoryRef(BaseModel):
    """
    A single branch synchronization target
    """

    branch: str
    path: str
    url: Optional[str] = None


def resolve_path(base_path: str, branch: str) -> str:
    """
    The working copy path for branch. The branch name is used verbatim
    as the final path segment.
    """

    return f'{base_path}/{branch}'


def repository_ref(base_path: str, branch: str, url: Optional[str] = None) -> RepositoryRef:
    return RepositoryRef(branch=branch, path=resolve_path(base_path, branch), url=url)


def _describe(err: Exception) -> str:
    stderr = getattr(err, 'stderr', None)
    if isinstance(stderr, bytes):
        stderr = stderr.decode('utf-8', errors='replace').strip()
    return f'{err} {stderr}' if stderr else str(err)


async def delete_branch(ref: RepositoryRef, git: GitOperations) -> str:
    try:
        await git.remove(ref.path)
    except VCS_ERRORS as e:
        logger.debug(f'Failed to Delete {ref.path} - {_describe(e)}')
        raise SyncFailed(SyncAction.DELETE, ref.branch) from e

    logger.debug('Delete Successful')
    return f'{ref.branch} Delete Successful'


async def clone_branch(ref: RepositoryRef, git: GitOperations) -> str:
    """
    Clone the repository into the branch path, then checkout the branch.
    The checkout is only attempted once the clone has completed.
    """

    if not ref.url:
        logger.debug(f'No clone URL for {ref.branch}')
        raise SyncFailed(SyncAction.CLONE, ref.branch)

    try:
        await git.clone(ref.url, ref.path)
    except VCS_ERRORS as e:
        logger.debug(f'Failed to Clone {ref.url} {ref.path} - {_describe(e)}')
        raise SyncFailed(SyncAction.CLONE, ref.branch) from e
    logger.debug('Git Clone Successful')

    # a failed checkout leaves the fresh clone in place
    try:
        await git.checkout(ref.path, ref.branch)
    except VCS_ERRORS as e:
        logger.debug(f'Failed to Checkout {ref.branch} {ref.path} - {_describe(e)}')
        raise SyncFailed(SyncAction.CHECKOUT, ref.branch) from e
    logger.debug('Git Checkout Successful')

    return f'Git Clone and Checkout of {ref.branch} Successful'


async def pull_branch(ref: RepositoryRef, git: GitOperations) -> str:
    try:
        await git.pull(ref.path)
    except VCS_ERRORS as e:
        logger.debug(f'Failed to Pull {ref.branch} {ref.path} - {_describe(e)}')
        raise SyncFailed(SyncAction.PULL, ref.branch) from e

    logger.debug('Git Pull Successful')
    return f'Git Pull of {ref.branch} Successful'


async def _ensure_synced(ref: RepositoryRef, git: GitOperations) -> str:
    if os.path.exists(ref.path):
        logger.debug(f'{ref.path} exists - Pull')
        return await pull_branch(ref, git)
    else:
        logger.debug(f'{ref.path} does not exist - Clone and Checkout')
        return await clone_branch(ref, git)


async def ensure_synced(ref: RepositoryRef, git: GitOperations) -> str:
    """
    Bring the branch working copy up to date, cloning it if this is the
    first time the branch has been seen. Returns the success message, or
    raises SyncFailed.
    """

    async with branch_lock(ref.branch):
        return await _ensure_synced(ref, git)


async def apply_disposition(
        ref: RepositoryRef,
        disposition: Disposition,
        git: GitOperations) -> Optional[str]:
    """
    Perform the action for an event disposition against the branch
    working copy. Returns the success message, or None for IGNORE.
    """

    if disposition is Disposition.IGNORE:
        return None

    async with branch_lock(ref.branch):
        if disposition is Disposition.DELETED:
            logger.debug('Delete Branch')
            return await delete_branch(ref, git)
        else:
            return await _ensure_synced(ref, git)


# The end.
