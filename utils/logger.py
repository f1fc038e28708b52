"""
Logging utility for the Pomodoro tracker.

One shared logger writes to the console and a rotating file. Qt's own
warnings (thread and timer misuse) are routed into it once install_qt_handler
has been called.
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_FILE = "pomo_tracker.log"


class Logger:
    """Owner of the shared application logger."""

    _instance: Optional[logging.Logger] = None
    _file_handler: Optional[RotatingFileHandler] = None

    @classmethod
    def get_logger(cls, name: str = "PomoTracker", log_dir: str = "logs") -> logging.Logger:
        """Get or create the shared logger."""
        if cls._instance is None:
            cls._instance = logging.getLogger(name)
            cls._instance.setLevel(logging.INFO)

            console_handler = logging.StreamHandler()
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
            cls._instance.addHandler(console_handler)

            cls.set_file(log_dir)

        return cls._instance

    @classmethod
    def set_file(cls, log_dir: Optional[str], max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5):
        """Point file output at log_dir; None turns file logging off."""
        log = cls._instance
        if cls._file_handler is not None:
            log.removeHandler(cls._file_handler)
            cls._file_handler.close()
            cls._file_handler = None
        if not log_dir:
            return

        os.makedirs(log_dir, exist_ok=True)
        handler = RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE),
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        log.addHandler(handler)
        cls._file_handler = handler

    @classmethod
    def set_level(cls, level: str):
        """Change the level of the shared logger, e.g. 'DEBUG'."""
        cls.get_logger().setLevel(getattr(logging, str(level).upper(), logging.INFO))

    @classmethod
    def configure(cls, settings: dict):
        """Apply the 'logging' config section (level, dir, max_bytes, backup_count)."""
        cls.set_level(settings.get('level', 'INFO'))
        if 'dir' in settings:
            cls.set_file(
                settings.get('dir'),
                max_bytes=int(settings.get('max_bytes', 10 * 1024 * 1024)),
                backup_count=int(settings.get('backup_count', 5)),
            )

    @classmethod
    def install_qt_handler(cls):
        """Forward Qt debug/warning/critical messages to the shared logger."""
        from PyQt5.QtCore import QtMsgType, qInstallMessageHandler

        levels = {
            QtMsgType.QtDebugMsg: logging.DEBUG,
            QtMsgType.QtInfoMsg: logging.INFO,
            QtMsgType.QtWarningMsg: logging.WARNING,
            QtMsgType.QtCriticalMsg: logging.ERROR,
            QtMsgType.QtFatalMsg: logging.CRITICAL,
        }
        log = cls.get_logger()

        def handler(msg_type, context, message):
            log.log(levels.get(msg_type, logging.WARNING), f"Qt: {message}")

        qInstallMessageHandler(handler)


# Global logger instance
logger = Logger.get_logger()
