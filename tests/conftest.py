"""
Shared pytest fixtures for puppethook tests.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import os
import subprocess
import tempfile

import pytest

from preoccupied.puppethook import config as config_module
from preoccupied.puppethook import sync
from preoccupied.puppethook.config import HookConfig


class RecordingGit:
    """
    Stand-in for GitOperations which records every call in order, and
    raises CalledProcessError for any operation named in fail.
    """

    def __init__(self, fail=()):
        self.calls = []
        self.fail = set(fail)


    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail:
            raise subprocess.CalledProcessError(128, ('git', name), stderr=b'fatal: simulated')


    async def clone(self, url, path):
        self._record('clone', url, path)

    async def pull(self, path):
        self._record('pull', path)

    async def checkout(self, path, ref):
        self._record('checkout', path, ref)

    async def remove(self, path):
        self._record('remove', path)

    async def configure_credential_store(self):
        self._record('configure_credential_store')

    async def write_credentials(self, filename, token, host='github.com'):
        self._record('write_credentials', filename, token, host)


    @property
    def names(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def temp_dir():
    """
    Create a temporary directory for tests.
    """

    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def base_path(temp_dir):
    """
    An empty environments directory.
    """

    path = os.path.join(temp_dir, 'environments')
    os.makedirs(path)
    return path


@pytest.fixture
def hook_config(base_path, temp_dir):
    """
    A complete HookConfig rooted in a temporary directory.
    """

    return HookConfig(
        auth_token='secret123',
        github_token='gh-token',
        initial_git_repo_url='https://github.com/test/puppet.git',
        base_path=base_path,
        credentials_file=os.path.join(temp_dir, '.git-credentials'),
    )


@pytest.fixture
def recording_git():
    return RecordingGit()


@pytest.fixture
def failing_git():
    """
    Factory for recording git stand-ins whose named operations fail.
    """

    def factory(*fail):
        return RecordingGit(fail=fail)

    return factory


@pytest.fixture(autouse=True)
def clear_shared_state():
    """
    Clear the branch locks and the cached config around each test.
    """

    sync._branch_locks.clear()
    sync._branch_users.clear()
    config_module.reset_config()
    yield
    sync._branch_locks.clear()
    sync._branch_users.clear()
    config_module.reset_config()


@pytest.fixture
def mock_env_vars(monkeypatch):
    """
    Clear environment variables read by the configuration loader.
    """

    env_vars_to_clear = [
        'CONFIG_PATH',
        'AUTH_TOKEN',
        'GITHUB_TOKEN',
        'INITIAL_GIT_REPO_URL',
        'INITIAL_GIT_BRANCH',
        'LOG_LEVEL',
        'PUPPET_ENVIRONMENTS_PATH',
        'GIT_CREDENTIALS_HOST',
        'GIT_CREDENTIALS_FILE',
        'PUPPETHOOK_HOST',
        'PUPPETHOOK_PORT',
    ]

    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.setenv('CONFIG_PATH', '/nonexistent/puppethook.yaml')
    return monkeypatch


# The end.
