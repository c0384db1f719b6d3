"""
Configuration model and loading for the puppethook application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, field_validator

from .errors import ConfigMissing


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = '/config/puppethook.yaml'

DEFAULT_BASE_PATH = '/code/environments'

DEFAULT_BRANCH = 'production'


LOG_LEVELS = ('critical', 'error', 'warning', 'info', 'debug')

LOG_LEVEL_ALIASES = {
    'silly': 'debug',
    'verbose': 'debug',
    'warn': 'warning',
}


_config: Optional['HookConfig'] = None


class HookConfig(BaseModel):
    """
    Process configuration, built once at startup
    """

    auth_token: Optional[str] = None
    github_token: Optional[str] = None
    initial_git_repo_url: Optional[str] = None
    initial_git_branch: str = DEFAULT_BRANCH

    base_path: str = DEFAULT_BASE_PATH

    credentials_host: str = 'github.com'
    credentials_file: Optional[str] = None

    log_level: str = 'info'

    host: str = '0.0.0.0'
    port: int = 3000


    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        level = str(v).strip().lower()
        level = LOG_LEVEL_ALIASES.get(level, level)
        if level not in LOG_LEVELS:
            raise ValueError(f'Unknown log level: {v}')
        return level


    @field_validator('initial_git_branch', mode='before')
    @classmethod
    def default_branch(cls, v: Any) -> str:
        # an empty INITIAL_GIT_BRANCH counts as unset
        return v or DEFAULT_BRANCH


    def check_required(self) -> None:
        """
        Raise ConfigMissing for the first required value that is absent.
        """

        pairs = (
            ('AUTH_TOKEN', self.auth_token),
            ('GITHUB_TOKEN', self.github_token),
            ('INITIAL_GIT_REPO_URL', self.initial_git_repo_url))

        for which, value in pairs:
            if not value:
                raise ConfigMissing(which)


    def credentials_path(self) -> str:
        """
        Location of the git credential store file
        """

        if self.credentials_file:
            return self.credentials_file
        return os.path.join(os.path.expanduser('~'), '.git-credentials')


def _config_from_env() -> Dict[str, Any]:
    """
    Build configuration dictionary from environment variables.
    """

    pairs = (
        ('AUTH_TOKEN', 'auth_token'),
        ('GITHUB_TOKEN', 'github_token'),
        ('INITIAL_GIT_REPO_URL', 'initial_git_repo_url'),
        ('INITIAL_GIT_BRANCH', 'initial_git_branch'),
        ('LOG_LEVEL', 'log_level'),
        ('PUPPET_ENVIRONMENTS_PATH', 'base_path'),
        ('GIT_CREDENTIALS_HOST', 'credentials_host'),
        ('GIT_CREDENTIALS_FILE', 'credentials_file'),
        ('PUPPETHOOK_HOST', 'host'),
        ('PUPPETHOOK_PORT', 'port'))

    result = {}
    for env_var, config_key in pairs:
        value = os.environ.get(env_var)
        if value is not None:
            result[config_key] = value

    return result


def load_config() -> HookConfig:
    """
    Load and validate the configuration from the optional config file
    and the environment. Environment values win over the file.

    Raises ConfigMissing if a required value is absent, and ValueError
    (or yaml.YAMLError) if the values cannot be read.
    """

    config_path = os.environ.get('CONFIG_PATH', DEFAULT_CONFIG_PATH)

    config_data = {}
    if os.path.exists(config_path):
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}
        if not isinstance(config_data, dict):
            raise ValueError(f'Config file {config_path} must contain a mapping')
        logger.debug(f'Read configuration file {config_path}')

    config_data.update(_config_from_env())

    config = HookConfig.model_validate(config_data)
    config.check_required()
    return config


def get_config() -> HookConfig:
    """
    Get the process-wide config object.
    """

    global _config

    if _config is None:
        _config = load_config()
        logger.info(f'Loaded configuration, environments under {_config.base_path}')

    return _config


def reset_config() -> None:
    """
    Forget the cached config, so the next get_config() loads it again.
    """

    global _config
    _config = None


# The end.
