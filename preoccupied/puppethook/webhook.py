"""
Authentication and interpretation of inbound webhook requests.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import json
import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ValidationError

from .errors import MalformedEvent, Unauthorized
from .sync import Disposition, RepositoryRef, repository_ref


logger = logging.getLogger(__name__)


PUSH_EVENT = 'push'

NOT_A_PUSH = 'Not a push message. Doing nothing.'


class PushRepository(BaseModel):
    clone_url: Optional[str] = None


class PushEvent(BaseModel):
    """
    The subset of a push notification payload that we act upon
    """

    ref: str

    # only a JSON true marks the ref as deleted, any other value is a change
    deleted: Any = None

    repository: Optional[PushRepository] = None


    def clone_url(self) -> Optional[str]:
        return self.repository.clone_url if self.repository else None


def check_auth(token: Optional[str], secret: str) -> None:
    """
    Raise Unauthorized unless the caller-supplied token matches the
    configured secret.
    """

    if token != secret:
        raise Unauthorized()


def branch_from_ref(ref: str) -> str:
    """
    The branch name is the third segment of a ref, eg. refs/heads/main
    """

    parts = ref.split('/')
    if len(parts) < 3 or not parts[2]:
        raise ValueError(f'Not a branch ref: {ref!r}')
    return parts[2]


def parse_event(
        event_type: Optional[str],
        payload: Optional[Dict[str, Any]],
        base_path: str) -> Tuple[Optional[RepositoryRef], Disposition]:
    """
    Classify an inbound notification. Non-push events produce
    (None, Disposition.IGNORE). Push events produce the branch
    RepositoryRef and either DELETED or CHANGED.

    Raises MalformedEvent if a push payload lacks the fields we need.
    """

    logger.debug(f'Event Type: {event_type}')
    logger.debug(f'Body Object {json.dumps(payload, indent=4, default=str)}')

    if event_type != PUSH_EVENT:
        return None, Disposition.IGNORE

    try:
        event = PushEvent.model_validate(payload or {})
        branch = branch_from_ref(event.ref)
    except (ValidationError, ValueError) as e:
        logger.debug(f'Malformed push message: {e}')
        raise MalformedEvent() from e

    ref = repository_ref(base_path, branch, event.clone_url())
    logger.debug(f'Git Object {ref.model_dump_json(indent=4)}')

    if event.deleted is True:
        return ref, Disposition.DELETED
    else:
        return ref, Disposition.CHANGED


# The end.
