"""Structured logging for compliance evaluation.

Every entry carries an event name plus key=value fields, e.g.

    logger.warn("alias_conflict", service="pay-api", stage="uat")

Output is JSON lines for log aggregators, or coloured text on a terminal.
LOG_FORMAT=json|text forces one or the other; the default (auto) picks text
only when the target stream is a TTY.
"""
import json
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, TextIO

COMPONENT = "release_compliance"

LEVELS = {'DEBUG': 0, 'INFO': 1, 'WARN': 2, 'ERROR': 3}
# Accept the stdlib spellings too (LOG_LEVEL=WARNING is common in deployments)
LEVEL_ALIASES = {'WARNING': 'WARN', 'CRITICAL': 'ERROR', 'FATAL': 'ERROR'}

FORMATS = ('auto', 'json', 'text')

_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARN': '\033[33m',
    'ERROR': '\033[31m',
}
_RESET = '\033[0m'


def _canonical_level(level: str) -> str:
    name = (level or 'INFO').strip().upper()
    name = LEVEL_ALIASES.get(name, name)
    return name if name in LEVELS else 'INFO'


class StructuredLogger:
    """Event logger writing DEBUG/INFO to stdout and WARN/ERROR to stderr."""

    def __init__(self, level: str = 'INFO', fmt: str = 'auto', component: str = COMPONENT):
        self.level = _canonical_level(level)
        self.fmt = fmt if fmt in FORMATS else 'auto'
        self.component = component

    def set_level(self, level: str) -> None:
        self.level = _canonical_level(level)

    def enabled_for(self, level: str) -> bool:
        return LEVELS[_canonical_level(level)] >= LEVELS[self.level]

    def _text(self, stream: TextIO) -> bool:
        if self.fmt == 'auto':
            return stream.isatty()
        return self.fmt == 'text'

    def _render_text(self, level: str, message: str, fields: Dict[str, Any]) -> str:
        kv = []
        for k, v in fields.items():
            if isinstance(v, (dict, list)):
                v = json.dumps(v, default=str)[:100]
            kv.append(f"{k}={v}")
        line = f"{_COLORS[level]}[{level}]{_RESET} {message}"
        return f"{line} | {' '.join(kv)}" if kv else line

    def _log(self, level: str, message: str, **fields: Any) -> None:
        level = _canonical_level(level)
        if not self.enabled_for(level):
            return

        stream = sys.stderr if level in ('WARN', 'ERROR') else sys.stdout
        if self._text(stream):
            print(self._render_text(level, message, fields), file=stream)
            return

        entry = {
            'ts': datetime.now(timezone.utc).isoformat(),
            'level': level,
            'component': self.component,
            'msg': message,
            **fields,
        }
        print(json.dumps(entry, default=str), file=stream)

    def debug(self, message: str, **fields: Any) -> None:
        self._log('DEBUG', message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log('INFO', message, **fields)

    def warn(self, message: str, **fields: Any) -> None:
        self._log('WARN', message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log('ERROR', message, **fields)


# Shared logger; config.load_config may raise or lower the level
logger = StructuredLogger(
    level=os.getenv('LOG_LEVEL', 'INFO'),
    fmt=os.getenv('LOG_FORMAT', 'auto').strip().lower(),
)
