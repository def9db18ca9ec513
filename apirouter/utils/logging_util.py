"""
Logger setup shared by the router and the parameter verifier.

LOG_FORMAT=json switches to one JSON object per line, LOG_LEVEL picks the
level and follows env_config reloads.
"""

import json
import logging
import re
import sys

from apirouter.utils.env_config import env_config

LOGGER_NAMES = ('apirouter.router', 'apirouter.verifier')

_PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'time': self.formatTime(record, '%Y-%m-%dT%H:%M:%S'),
            'name': record.name,
            'level': record.levelname,
            'message': record.getMessage(),
        }
        try:
            return json.dumps(payload, ensure_ascii=False)
        except Exception:
            return f'{payload}'


class RedactFilter(logging.Filter):
    """Redacts credentials that end up in logged header or cookie values.

    Version headers and cookies are logged on mismatch, so anything that looks
    like an authorization header, token or session cookie is masked.
    """

    PATTERNS = [
        re.compile(r'(?i)(authorization\s*[:=]\s*)([^;\r\n]+)'),
        re.compile(r'(?i)(x-api-key\s*[:=]\s*)([^;\r\n]+)'),
        re.compile(r'(?i)(api[_-]?key\s*[:=]\s*)([^;\r\n]+)'),
        re.compile(r'(?i)(cookie\s*[:=]\s*)([^;\r\n]+)'),
        re.compile(r'(?i)(session[_-]?id\s*["\']?\s*[:=]\s*["\']?)([^"\';\r\n\s]+)(["\']?)'),
        re.compile(r'(?i)(token\s*["\']?\s*[:=]\s*["\']?)([a-zA-Z0-9_\-\.]{20,})(["\']?)'),
        re.compile(r'\b(eyJ[a-zA-Z0-9_\-]+\.eyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+)\b'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = str(record.getMessage())
            red = msg
            for pat in self.PATTERNS:
                if pat.groups >= 2:
                    red = pat.sub(lambda m: (
                        m.group(1) +
                        '[REDACTED]' +
                        (m.group(3) if m.lastindex and m.lastindex >= 3 else '')
                    ), red)
                else:
                    red = pat.sub('[REDACTED]', red)
            if red != msg:
                record.msg = red
                record.args = None
        except Exception:
            pass
        return True


def _level(value) -> int:
    if isinstance(value, int):
        return value
    return getattr(logging, str(value or 'INFO').upper(), logging.INFO)


def configure_logger(logger_name: str, stream=None) -> logging.Logger:
    """Attach a single console handler to the named logger.

    Calling it again replaces the handler instead of stacking another one.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(_level(env_config.get('LOG_LEVEL', 'INFO')))

    for handler in logger.handlers[:]:
        if getattr(handler, '_apirouter', False):
            logger.removeHandler(handler)

    fmt_is_json = str(env_config.get('LOG_FORMAT', 'plain')).lower() == 'json'
    console = logging.StreamHandler(stream=stream or sys.stdout)
    console.setFormatter(JSONFormatter() if fmt_is_json else logging.Formatter(_PLAIN_FORMAT))
    console.addFilter(RedactFilter())
    console._apirouter = True
    logger.addHandler(console)
    return logger


def configure_logging(stream=None) -> None:
    """Configure every apirouter logger and follow LOG_LEVEL changes."""
    for name in LOGGER_NAMES:
        configure_logger(name, stream=stream)


def ensure_logging() -> None:
    """Apply LOG_LEVEL to the apirouter loggers without attaching handlers.

    Output stays with whatever the host application configured; call
    configure_logging() for a console handler of our own.
    """
    for name in LOGGER_NAMES:
        logging.getLogger(name).setLevel(_level(env_config.get('LOG_LEVEL', 'INFO')))


def _on_log_level_change(old_value, new_value):
    for name in LOGGER_NAMES:
        logging.getLogger(name).setLevel(_level(new_value))


env_config.register_callback('LOG_LEVEL', _on_log_level_change)
