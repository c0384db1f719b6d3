"""
Puppet environment webhook receiver.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

from preoccupied.puppethook.app import app
from preoccupied.puppethook.config import HookConfig, get_config


__all__ = ['app', 'HookConfig', 'get_config']


# The end.
