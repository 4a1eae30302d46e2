"""
Logging for the dense image toolkit.

Image operations never raise on bad shapes or parameters; they return an
empty, zero-filled or unchanged result instead. The reason is reported on a
library logger, at DEBUG for shape/parameter problems and at WARNING for
failed allocations. All module loggers hang below one root logger,
``dense_image_toolkit``, configured here.
"""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Dict, Any, Union, Iterator, List

LevelLike = Union[int, str]


def _resolve_level(level: LevelLike) -> int:
    """Turn a level name ("debug", "INFO", ...) or number into a number."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level}")
    return resolved


class LoggerConfig:
    """Owner of the library root logger and its handlers."""

    _configured = False
    _root_logger_name = 'dense_image_toolkit'
    _default_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    @classmethod
    def _root(cls) -> logging.Logger:
        return logging.getLogger(cls._root_logger_name)

    @classmethod
    def _build_handlers(cls, level: int, formatter: logging.Formatter,
                        log_file: Optional[Path]) -> List[logging.Handler]:
        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if log_file is not None:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file))

        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
        return handlers

    @classmethod
    def setup_root_logger(
        cls,
        level: LevelLike = logging.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[Path] = None,
        force: bool = False
    ) -> logging.Logger:
        """
        Configure the library root logger.

        Args:
            level: Logging level, numeric or by name (default: INFO)
            format_string: Record format (default: time, name, level, message)
            log_file: Also write records to this file
            force: Replace the handlers of an already configured logger

        Returns:
            logging.Logger: The library root logger
        """
        root_logger = cls._root()
        if cls._configured and not force:
            return root_logger

        level = _resolve_level(level)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(format_string or cls._default_format)
        for handler in cls._build_handlers(level, formatter, log_file):
            root_logger.addHandler(handler)

        root_logger.setLevel(level)
        # library records stay out of the application's root logger
        root_logger.propagate = False
        cls._configured = True

        root_logger.debug(f"Library logging at {logging.getLevelName(level)}"
                          + (f", file {log_file}" if log_file else ""))
        return root_logger

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Child logger ``dense_image_toolkit.<name>``; configures the root on first use."""
        if not cls._configured:
            cls.setup_root_logger()
        return logging.getLogger(f"{cls._root_logger_name}.{name}")

    @classmethod
    def set_level(cls, level: LevelLike) -> None:
        """
        Change the level of the root logger and of its handlers.

        Raises:
            ValueError: If ``level`` is an unknown level name
        """
        level = _resolve_level(level)
        root_logger = cls._root()
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def get_configuration_info(cls) -> Dict[str, Any]:
        """
        Describe the current configuration.

        Returns:
            Dict[str, Any]: Root logger name, level and handlers
        """
        if not cls._configured:
            return {'configured': False}

        root_logger = cls._root()
        return {
            'configured': True,
            'root_logger_name': cls._root_logger_name,
            'level': logging.getLevelName(root_logger.level),
            'handlers': [
                {'type': type(handler).__name__, 'level': logging.getLevelName(handler.level)}
                for handler in root_logger.handlers
            ]
        }

    @classmethod
    @contextmanager
    def diagnostics(cls, level: LevelLike = logging.DEBUG) -> Iterator[logging.Logger]:
        """
        Temporarily lower the library level, e.g. to see why an operation
        returned an empty image.

            with LoggerConfig.diagnostics():
                result = resize_bilinear(image, 0.001)
        """
        root_logger = cls._root()
        previous = (root_logger.level, [handler.level for handler in root_logger.handlers])
        cls.set_level(level)
        try:
            yield root_logger
        finally:
            root_logger.setLevel(previous[0])
            for handler, handler_level in zip(root_logger.handlers, previous[1]):
                handler.setLevel(handler_level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger for a library module.

    Args:
        name: Module name (default: the caller's ``__name__``)

    Returns:
        logging.Logger: Child of the library root logger
    """
    if name is None:
        import inspect
        frame = inspect.currentframe().f_back
        name = frame.f_globals.get('__name__', 'unknown')

    return LoggerConfig.get_logger(name)


# Configure with defaults on import
if not LoggerConfig.is_configured():
    LoggerConfig.setup_root_logger()
