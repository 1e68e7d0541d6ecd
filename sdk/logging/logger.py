"""
Hierarchical logger with automatic name detection.

Features:
- Logger name derived from the caller's module (and class, when called from a method)
- One rotating log file per top-level app ('termbook.log')
- Structured fields appended to the message: log.info("Added", term="foo")
- Console mirror, optional

Usage:
    from sdk.logging import getLogger

    class TermStore:
        def __init__(self):
            self.log = getLogger()  # 'termbook.core.store.TermStore'

        def addDefine(self, term, definition):
            self.log.info("[TermStore] Added term", term=term)

Property of Uncompromising Sensors LLC.
"""

import inspect, logging, logging.handlers, os, socket
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone as tz


_hostname = socket.gethostname()
_configured = False
_fileHandlers = {}  # logPath -> handler, shared between loggers of the same app
_config = {
    'logDir': None,
    'maxBytes': 10_000_000,
    'backupCount': 5,
    'console': True,
    'level': logging.INFO,
    'utc': False
}

# Attributes every LogRecord carries; anything else is a structured field
_RECORD_FIELDS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName',
    'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'hostname', 'asctime', 'taskName'
}


def configureLogging(logDir: Optional[str] = None, maxBytes: int = 10_000_000,
                     backupCount: int = 5, console: bool = True,
                     level: str = 'INFO', utc: bool = False):
    """
    Configure global logging settings (call once at app startup).

    Loggers created before this call keep their handlers.

    Args:
        logDir: Directory for log files (default: ./logs)
        maxBytes: Size per log file before rotation
        backupCount: Rotated files kept per app
        console: Also log to stderr
        level: Minimum log level name
        utc: Use UTC timestamps
    """
    global _configured

    if logDir is None:
        logDir = os.path.abspath(os.path.join(os.getcwd(), "logs"))

    _config.update({'logDir': logDir, 'maxBytes': maxBytes, 'backupCount': backupCount,
                    'console': console, 'level': getattr(logging, level.upper()), 'utc': utc})

    Path(logDir).mkdir(parents=True, exist_ok=True)
    _configured = True


def _autoDetectName() -> str:
    """Derive a logger name like 'termbook.core.store.TermStore' from the call stack."""
    frame = inspect.currentframe()
    try:
        current = frame
        while current is not None:
            current = current.f_back
            if current is None:
                break

            module = inspect.getmodule(current)
            if module is None:
                continue

            moduleName = module.__name__
            if moduleName.startswith('sdk.logging') or moduleName.startswith('importlib'):
                continue
            if moduleName == '__main__':
                continue

            parts = moduleName.split('.')
            if parts and parts[0] == 'sdk':
                parts = parts[1:]

            className = None
            if 'self' in current.f_locals:
                className = current.f_locals['self'].__class__.__name__
            elif 'cls' in current.f_locals:
                className = current.f_locals['cls'].__name__

            hierarchy = '.'.join(parts) if parts else 'unknown'
            if className:
                hierarchy = f"{hierarchy}.{className}"
            return hierarchy

        return 'unknown'
    finally:
        del frame


class StructuredFormatter(logging.Formatter):
    """Format: timestamp - hostname - logger.name - level - message [field1=value1, field2=value2]"""

    def __init__(self, fmt=None, datefmt=None, utc=False):
        super().__init__(fmt, datefmt)
        self.utc = utc

    def formatTime(self, record, datefmt=None):
        if self.utc:
            ct = datetime.fromtimestamp(record.created, tz=tz.utc)
        else:
            ct = datetime.fromtimestamp(record.created)

        if datefmt:
            return ct.strftime(datefmt)
        return f"{ct.strftime('%Y-%m-%d %H:%M:%S')},{int(record.msecs):03d}"

    def format(self, record):
        record.hostname = _hostname

        structuredFields = [
            f"{key}={value}" for key, value in record.__dict__.items()
            if key not in _RECORD_FIELDS and not key.startswith('_')
        ]

        # Other handlers share the record, so the message is restored afterwards
        originalMsg = record.msg
        if structuredFields:
            record.msg = f"{originalMsg} [{', '.join(structuredFields)}]"
        try:
            return super().format(record)
        finally:
            record.msg = originalMsg


def getLogger(name: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger, auto-detecting its name from the caller when omitted.

    The returned logger accepts structured fields as keyword arguments:
        log.warning("Save failed", path=path, exc_info=True)
    """
    if not _configured:
        configureLogging()

    if name is None:
        name = _autoDetectName()

    logger = logging.getLogger(name)
    logger.propagate = False

    if not logger.handlers and not getattr(logger, '_configuredBySdk', False):
        logger.setLevel(_config['level'])

        appName = name.split('.')[0]
        logPath = str(Path(_config['logDir']) / f"{appName}.log")

        if logPath not in _fileHandlers:
            fileHandler = logging.handlers.RotatingFileHandler(
                logPath,
                maxBytes=_config['maxBytes'],
                backupCount=_config['backupCount'],
                encoding='utf-8'
            )
            fileHandler.setLevel(_config['level'])
            fileHandler.setFormatter(StructuredFormatter(
                '%(asctime)s - %(hostname)s - %(name)s - %(levelname)s - %(message)s',
                utc=_config['utc']
            ))
            _fileHandlers[logPath] = fileHandler

        logger.addHandler(_fileHandlers[logPath])

        if _config['console']:
            consoleHandler = logging.StreamHandler()
            consoleHandler.setLevel(_config['level'])
            consoleHandler.setFormatter(StructuredFormatter(
                '%(name)s - %(levelname)s - %(message)s',
                utc=_config['utc']
            ))
            logger.addHandler(consoleHandler)

        logger._configuredBySdk = True

    return _wrapLogger(logger)


def _wrapLogger(logger: logging.Logger) -> logging.Logger:
    """Let each level method take structured fields as **kwargs instead of extra={...}."""
    if getattr(logger, '_isWrapped', False):
        return logger

    def wrap(original):
        def method(msg, *args, **kwargs):
            exc_info = kwargs.pop('exc_info', False)
            if kwargs:
                original(msg, *args, extra=kwargs, exc_info=exc_info)
            else:
                original(msg, *args, exc_info=exc_info)
        return method

    logger.debug = wrap(logger.debug)
    logger.info = wrap(logger.info)
    logger.warning = wrap(logger.warning)
    logger.error = wrap(logger.error)
    logger.critical = wrap(logger.critical)
    logger._isWrapped = True

    return logger
