"""
The contents of this file are property of Doorman Dev, LLC
Review the Apache License 2.0 for valid authorization of use
See https://github.com/apidoorman/doorman for more information
"""

import logging
import os
import sys
import time
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger('murmur.api')

_VALID_ENVS = ('development', 'production')
_VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
PASSWORD_PLACEHOLDER = '<PASSWORD>'


@dataclass(frozen=True)
class AppConfig:
    env: str = 'development'
    host: str = '0.0.0.0'
    port: int = 3000
    mem_or_external: str = 'EXTERNAL'
    database_uri: str | None = None
    database_name: str = 'murmur'
    db_connect_retries: int = 3
    db_server_selection_timeout_ms: int = 5000
    api_prefix: str = '/api/v1/secrets'
    allowed_origins: list[str] = field(default_factory=lambda: ['*'])
    log_level: str = 'INFO'
    log_format: str = 'plain'
    logs_dir: str = 'logs'
    timezone: str | None = None

    @property
    def memory_only(self) -> bool:
        return self.mem_or_external == 'MEM'

    @property
    def is_production(self) -> bool:
        return self.env == 'production'


def load_env_files() -> None:
    """Load config.env, then .env, without overriding variables already set."""
    if 'PYTEST_CURRENT_TEST' in os.environ or 'pytest' in sys.modules:
        return
    for name in ('config.env', '.env'):
        path = find_dotenv(name, usecwd=True)
        if path:
            load_dotenv(path, override=False)


def build_database_uri(template: str | None, password: str | None) -> str | None:
    if not template:
        return None
    if PASSWORD_PLACEHOLDER in template:
        if not password:
            raise RuntimeError(
                'DATABASE contains a <PASSWORD> placeholder but DATABASE_PASSWORD is not set'
            )
        return template.replace(PASSWORD_PLACEHOLDER, password)
    return template


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f'{name} must be an integer, got {raw!r}') from e


def load_config() -> AppConfig:
    """Build the application configuration from the environment."""
    load_env_files()

    env = os.getenv('ENV', 'development').strip().lower()
    if env not in _VALID_ENVS:
        raise RuntimeError(f'ENV must be one of {", ".join(_VALID_ENVS)}, got {env!r}')

    port = _int_env('PORT', 3000)
    if not 0 < port < 65536:
        raise RuntimeError(f'PORT out of range: {port}')

    log_level = os.getenv('LOG_LEVEL', 'INFO').strip().upper()
    if log_level not in _VALID_LOG_LEVELS:
        raise RuntimeError(f'LOG_LEVEL must be one of {", ".join(_VALID_LOG_LEVELS)}')

    mem_or_external = os.getenv('MEM_OR_EXTERNAL', 'EXTERNAL').strip().upper()
    database_uri = build_database_uri(os.getenv('DATABASE'), os.getenv('DATABASE_PASSWORD'))
    if mem_or_external != 'MEM' and not database_uri:
        raise RuntimeError(
            'DATABASE is required when MEM_OR_EXTERNAL != MEM. '
            'Set it to a MongoDB connection string or run with MEM_OR_EXTERNAL=MEM.'
        )

    prefix = os.getenv('API_PREFIX', '/api/v1/secrets').strip().rstrip('/')
    if prefix and not prefix.startswith('/'):
        prefix = '/' + prefix

    origins = [o.strip() for o in os.getenv('ALLOWED_ORIGINS', '*').split(',') if o.strip()]

    return AppConfig(
        env=env,
        host=os.getenv('HOST', '0.0.0.0'),
        port=port,
        mem_or_external=mem_or_external,
        database_uri=database_uri,
        database_name=os.getenv('DATABASE_NAME', 'murmur'),
        db_connect_retries=max(1, _int_env('DB_CONNECT_RETRIES', 3)),
        db_server_selection_timeout_ms=_int_env('DB_SERVER_SELECTION_TIMEOUT_MS', 5000),
        api_prefix=prefix,
        allowed_origins=origins or ['*'],
        log_level=log_level,
        log_format=os.getenv('LOG_FORMAT', 'plain').strip().lower(),
        logs_dir=os.path.abspath(os.getenv('LOGS_DIR', 'logs')),
        timezone=os.getenv('TZ') or None,
    )


def apply_timezone(config: AppConfig) -> None:
    # time.tzset is POSIX only
    if not config.timezone:
        return
    os.environ['TZ'] = config.timezone
    tzset = getattr(time, 'tzset', None)
    if tzset is not None:
        tzset()
        logger.info(f'Process timezone set to {config.timezone}')
