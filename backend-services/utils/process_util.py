"""
Process-level failure handling.

An uncaught exception or an exception escaping an asyncio task is logged and
terminates the process with status 1. There is no in-process recovery; an
external process manager is expected to restart the service.
"""

import logging
import os
import signal
import sys

logger = logging.getLogger('murmur.api')

_fatal_error = False


def fatal_error_seen() -> bool:
    return _fatal_error


def _mark_fatal():
    global _fatal_error
    _fatal_error = True


def handle_uncaught_exception(exc_type, exc, tb):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logger.critical('UNCAUGHT EXCEPTION! Shutting down...', exc_info=(exc_type, exc, tb))
    logger.critical(f'{exc_type.__name__}: {exc}')
    sys.exit(1)


def install_uncaught_exception_hook():
    sys.excepthook = handle_uncaught_exception


def request_shutdown():
    """Ask the running server to stop gracefully; the runner then exits with status 1."""
    _mark_fatal()
    os.kill(os.getpid(), signal.SIGTERM)


def handle_unhandled_rejection(loop, context):
    exc = context.get('exception')
    logger.critical('UNHANDLED REJECTION! Shutting down...')
    if exc is not None:
        logger.critical(f'{type(exc).__name__}: {exc}', exc_info=exc)
    else:
        logger.critical(context.get('message', 'unknown event loop error'))
    request_shutdown()


def install_unhandled_rejection_handler(loop):
    loop.set_exception_handler(handle_unhandled_rejection)
