"""
Exception types for the puppethook service.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

from enum import Enum


class HookError(Exception):
    """
    An error which is reported back to the webhook caller as a status
    code and a fixed message.
    """

    status: int = 500
    message: str = 'Internal Error'


    def __init__(self, message: str = None, status: int = None):
        if message is not None:
            self.message = message
        if status is not None:
            self.status = status
        super().__init__(self.message)


class Unauthorized(HookError):
    status = 401
    message = 'Access Denied'


class MalformedEvent(HookError):
    status = 400
    message = 'Malformed push message'


class SyncAction(Enum):
    CLONE = 'Clone'
    CHECKOUT = 'Checkout'
    PULL = 'Pull'
    DELETE = 'Delete'


class SyncFailed(HookError):
    """
    A single VCS operation against a branch working copy failed.
    """

    status = 500


    def __init__(self, action: SyncAction, branch: str):
        self.action = action
        self.branch = branch
        super().__init__(f'Failed to {action.value} {branch}')


class ConfigMissing(Exception):
    """
    A required configuration value was not provided.
    """

    def __init__(self, which: str):
        self.which = which
        super().__init__(f'{which} required')


class BootstrapError(Exception):
    """
    The one-time startup setup could not be completed.
    """


# The end.
