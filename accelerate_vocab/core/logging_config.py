"""
Logging setup for Accelerate Vocab.

Every record written through the ``accelerate_vocab`` logger (the Flask app
logger and the module loggers below it) is tagged with the request path and
the signed-in profile, so a pupil's game actions can be followed in the file.

Settings come from the app config:
- LOG_LEVEL   DEBUG / INFO / WARNING / ERROR
- LOG_DIR     directory for the rotating log file
- LOG_FORMAT  ``text`` (default) or ``json``
"""

import logging
import logging.handlers
import os

from flask import Flask, g, has_request_context, request


LOGGER_NAME = 'accelerate_vocab'
LOG_FILE_NAME = 'accelerate_vocab.log'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

TEXT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s [%(path)s profile=%(profile_id)s]: %(message)s'
JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"path": "%(path)s", "profile_id": "%(profile_id)s", "message": "%(message)s"}'
)


class RequestContextFilter(logging.Filter):
    """Adds ``path`` and ``profile_id`` to each record ('-' outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.path = '-'
        record.profile_id = '-'
        if has_request_context():
            record.path = request.path
            auth = g.get('auth')
            if auth is not None and auth.profile_id is not None:
                record.profile_id = auth.profile_id
        return True


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(RequestContextFilter())
    return handler


def setup_logging(app: Flask) -> logging.Logger:
    """Give the package logger a console handler and a rotating file handler.

    Calling it again (a second app in the same process, as in tests) replaces
    the handlers rather than stacking them.
    """
    config = app.config
    level_name = str(config.get('LOG_LEVEL', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)

    log_dir = config.get('LOG_DIR') or os.path.join(app.root_path, '..', 'logs')
    os.makedirs(log_dir, exist_ok=True)

    use_json = str(config.get('LOG_FORMAT', 'text')).lower() == 'json'
    formatter = logging.Formatter(JSON_FORMAT if use_json else TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.setLevel(level)
    logger.propagate = False

    logger.addHandler(_handler(logging.StreamHandler(), level, formatter))
    logger.addHandler(_handler(
        logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE_NAME),
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding='utf-8',
        ),
        level,
        formatter,
    ))

    # request lines from the dev server are noise next to game events
    logging.getLogger('werkzeug').setLevel(logging.WARNING)

    logger.info("Logging to %s at %s", log_dir, level_name)
    return logger
