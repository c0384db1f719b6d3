"""
One-time startup synchronization of the initial environment branch.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import subprocess

from .config import HookConfig
from .errors import BootstrapError
from .git import GitOperations
from .sync import ensure_synced, repository_ref


logger = logging.getLogger(__name__)


async def setup_git(config: HookConfig, git: GitOperations) -> None:
    """
    Configure the git credential store and write the credentials for
    the remote repository host into it.
    """

    try:
        logger.info('Setting up Git Configuration')
        await git.configure_credential_store()

        logger.info('Setting up Git Credentials')
        await git.write_credentials(
            config.credentials_path(),
            config.github_token,
            host=config.credentials_host)

    except (subprocess.CalledProcessError, OSError) as e:
        raise BootstrapError(f'Failed to set up git credentials: {e}') from e


async def bootstrap(config: HookConfig, git: GitOperations) -> str:
    """
    Set up git credentials, then clone or pull the initial branch.
    Returns the sync message. Any failure propagates, and is expected
    to be fatal to the process.
    """

    ref = repository_ref(config.base_path, config.initial_git_branch, config.initial_git_repo_url)
    logger.info(f'Getting initial catalog - {ref.url} {ref.branch}')

    await setup_git(config, git)

    message = await ensure_synced(ref, git)
    logger.info(message)
    logger.info('Setup Complete')
    return message


# The end.
