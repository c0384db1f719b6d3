"""
FastAPI webhook application for the puppethook service.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse

from .bootstrap import bootstrap
from .config import HookConfig, get_config
from .errors import HookError
from .git import GitOperations
from .sync import apply_disposition
from .webhook import NOT_A_PUSH, check_auth, parse_event


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


_git = GitOperations()


def get_git() -> GitOperations:
    """
    The git operations used by request handlers
    """

    return _git


async def app_startup(config: HookConfig = None, git: GitOperations = None):
    """
    Startup event handler for the app. Any failure here is fatal.
    """

    try:
        if config is None:
            config = get_config()
        if git is None:
            git = get_git()

        logging.getLogger().setLevel(config.log_level.upper())
        await bootstrap(config, git)

    except Exception as e:
        logger.error(f'Failed to load configuration or sync initial branch: {e}', exc_info=True)
        raise


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """
    Lifespan event handler for the app
    """

    logger.info('Starting up...')

    await app_startup()

    try:
        yield
    finally:

        logger.info('Shutting down...')


app = FastAPI(lifespan=app_lifespan)


@app.exception_handler(HookError)
async def hook_error_handler(request: Request, exc: HookError):
    """
    Report a HookError to the caller as its status and message only
    """

    return JSONResponse(status_code=exc.status, content={'message': exc.message})


def require_auth(auth: Optional[str] = None, config: HookConfig = Depends(get_config)) -> HookConfig:
    """
    Check the auth query parameter before anything else is looked at
    """

    check_auth(auth, config.auth_token)
    return config


async def read_payload(request: Request) -> Any:
    """
    The JSON body of the request, or None if it has no JSON body. Push
    events without one are rejected as malformed when parsed.
    """

    try:
        return await request.json()
    except ValueError:
        return None


@app.get('/_status')
async def status():
    """
    Liveness check, requires no auth
    """

    return {'status': 'OK'}


@app.post('/puppet-webhook')
async def puppet_webhook(
        request: Request,
        x_github_event: Optional[str] = Header(None),
        config: HookConfig = Depends(require_auth),
        git: GitOperations = Depends(get_git)):
    """
    Synchronize the branch named by a push notification
    """

    payload = await read_payload(request)
    ref, disposition = parse_event(x_github_event, payload, config.base_path)
    if ref is None:
        return {'message': NOT_A_PUSH}

    try:
        message = await apply_disposition(ref, disposition, git)
    except HookError as e:
        logger.error(f"Error syncing branch '{ref.branch}': {e}")
        raise

    return {'message': message}


# The end.
