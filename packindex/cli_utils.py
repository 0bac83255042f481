"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
from functools import wraps
from typing import Any, Dict

import click

from . import render
from .config import load_config
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .services.store_service import RepositoryStore

logger = logging.getLogger(__name__)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Every CommandError is reported as a diagnostic on stderr and
      terminates with its exit code
    - Unexpected exceptions are reported and exit with a general error
    - Ctrl+C exits with the SIGINT exit code

    Commands are fatal on the first failure; nothing is retried.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            func(*args, **kwargs)
        except KeyboardInterrupt:
            render.fatal("Interrupted by user")
            sys.exit(INTERRUPTED)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            logger.debug(f"{type(e).__name__}: {e}")
            render.fatal(str(e))
            sys.exit(e.exit_code)
        except Exception as e:
            logger.exception("Command failed")
            render.fatal(f"Command failed: {e}")
            sys.exit(get_exit_code_for_exception(e))
        sys.exit(SUCCESS)

    return wrapper


def get_config(ctx: click.Context) -> Dict[str, Any]:
    """Configuration loaded by the root group, or loaded now."""
    obj = ctx.ensure_object(dict)
    if 'config' not in obj:
        obj['config'] = load_config()
    return obj['config']


def get_store(ctx: click.Context) -> RepositoryStore:
    """Store built from the active configuration."""
    return RepositoryStore.from_config(get_config(ctx))


def print_json(item: Dict[str, Any]) -> None:
    """Emit one JSONL record on stdout."""
    print(json.dumps(item, ensure_ascii=False), flush=True)
