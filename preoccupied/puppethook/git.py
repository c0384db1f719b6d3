"""
Git operations against branch working copies.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import asyncio
import logging
import os
import shutil
import subprocess


logger = logging.getLogger(__name__)


async def run(*args: str, cwd: str = None) -> bytes:
    logger.debug(f'Running {args} in {cwd}')
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        raise subprocess.CalledProcessError(process.returncode, args, output=stdout, stderr=stderr)
    return stdout


class GitOperations:
    """
    Wraps the git command line. Every operation takes the working copy
    path explicitly, and raises on failure (CalledProcessError from git,
    or OSError from the filesystem).
    """

    def __init__(self, git_binary: str = 'git'):
        self.git_binary = git_binary


    async def clone(self, url: str, path: str) -> None:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        await run(self.git_binary, 'clone', url, path)


    async def pull(self, path: str) -> None:
        await run(self.git_binary, 'pull', cwd=path)


    async def checkout(self, path: str, ref: str) -> None:
        await run(self.git_binary, 'checkout', ref, cwd=path)


    async def remove(self, path: str) -> None:
        # a missing path raises FileNotFoundError
        await asyncio.to_thread(shutil.rmtree, path)


    async def configure_credential_store(self) -> None:
        """
        Have git keep credentials in the plain-text store file for all
        subsequent operations by this user.
        """

        await run(self.git_binary, 'config', '--global', 'credential.helper', 'store')


    async def write_credentials(self, filename: str, token: str, host: str = 'github.com') -> None:
        """
        Write a credential store file granting access to host via token.
        """

        def write():
            fd = os.open(filename, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, 'w') as fout:
                fout.write(f'https://{token}:@{host}\n')

        await asyncio.to_thread(write)


# The end.
