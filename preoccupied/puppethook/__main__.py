"""
Command line entry point for running the puppethook service.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import sys

import uvicorn
import yaml

from .config import get_config
from .errors import ConfigMissing


logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=logging.INFO)

    try:
        config = get_config()
    except (ConfigMissing, ValueError, yaml.YAMLError) as e:
        logger.error(str(e))
        sys.exit(1)

    # uvicorn exits non-zero if the startup bootstrap fails
    uvicorn.run(
        'preoccupied.puppethook.app:app',
        host=config.host,
        port=config.port,
        log_level=config.log_level,
    )


if __name__ == '__main__':
    main()


# The end.
