#!/usr/bin/env python3
"""
logging_manager.py
--------------------
Centralized logging system for dream diary operations.

Provides structured logging with rotation for database operations and
CLI commands. Components that receive no logger use the NullLogger
through safe_logger(), so logging is always optional.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import click


class DreamDiaryLogger:
    """
    Structured logger with rotating files.

    Writes every operation to ``<component>.log`` and errors only to
    ``errors.log``. Warnings and above are also echoed to the console.

    Attributes:
        log_dir: Directory for log files
        component_name: Name of the component using this logger
        main_logger: Main logger for all operations
        error_logger: Dedicated logger for errors only
    """

    def __init__(
        self,
        log_dir: Path,
        component_name: str = "dreamdiary",
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
    ) -> None:
        """
        Initialize the logging system.

        Args:
            log_dir: Directory for log files
            component_name: Name for the component logger (e.g. 'database', 'cli')
            max_bytes: Maximum log file size before rotation (default: 10MB)
            backup_count: Number of rotated files to keep (default: 5)
        """
        self.log_dir = Path(log_dir)
        self.component_name = component_name
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self._setup_loggers()

    def _setup_loggers(self) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = logging.getLogger(f"{self.component_name}.operations")
        self.main_logger.setLevel(logging.DEBUG)
        # Reset only this logger's handlers
        self.main_logger.handlers = []

        self.error_logger = logging.getLogger(f"{self.component_name}.errors")
        self.error_logger.setLevel(logging.ERROR)
        self.error_logger.handlers = []

        self._create_file_handler(
            self.main_logger,
            self.log_dir / f"{self.component_name}.log",
            logging.DEBUG,
        )
        self._create_file_handler(
            self.error_logger,
            self.log_dir / "errors.log",
            logging.ERROR,
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        self.main_logger.addHandler(console_handler)

    def _create_file_handler(
        self, logger: logging.Logger, file_path: Path, level: int
    ) -> None:
        handler = RotatingFileHandler(
            file_path,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        handler.setLevel(level)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)

    def log_operation(
        self, operation: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log a completed operation.

        Args:
            operation: Name of the operation
            details: Optional operation details dictionary
        """
        details = details or {}
        self.main_logger.info(
            f"OPERATION - {operation}: {json.dumps(details, default=str, ensure_ascii=False)}"
        )

    def log_error(
        self, error: Exception, context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log an error with context and traceback to errors.log.

        Args:
            error: Exception that occurred
            context: Optional context information dictionary
        """
        context = context or {}
        self.error_logger.error(f"ERROR - {type(error).__name__}: {error}")

        if context:
            context_str = ", ".join(f"{k}={v}" for k, v in context.items())
            self.error_logger.error(f"Context: {context_str}")

        self.error_logger.error(f"Traceback:\n{traceback.format_exc()}")

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, "DEBUG", message, details)

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, "INFO", message, details)

    def log_warning(
        self, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        self._log(logging.WARNING, "WARNING", message, details)

    def _log(
        self,
        level: int,
        label: str,
        message: str,
        details: Optional[Dict[str, Any]],
    ) -> None:
        if details:
            self.main_logger.log(
                level,
                f"{label} - {message}: {json.dumps(details, default=str, ensure_ascii=False)}",
            )
        else:
            self.main_logger.log(level, f"{label} - {message}")

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        """
        Log full error details to file and return a one-line CLI message.

        Args:
            error: Exception to log
            context: Optional context about where the error occurred
            show_traceback: If True, append the traceback to the message

        Returns:
            Formatted error message suitable for CLI display
        """
        self.log_error(error, context or {"source": "cli"})

        message = f"❌ {type(error).__name__}: {error}"
        if show_traceback:
            return f"{message}\n\n{traceback.format_exc()}"
        return message


def handle_cli_error(
    ctx: "click.Context",
    error: Exception,
    operation: str,
    additional_context: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """
    Standardized error handling for CLI commands.

    Logs the error through the logger stored on the click context, prints a
    clean message to stderr and exits. Never returns.

    Args:
        ctx: Click context object containing logger and verbose flag
        error: Exception that occurred
        operation: Name of the failed operation (e.g. 'dream_add')
        additional_context: Optional extra context
        exit_code: Exit code for sys.exit() (default: 1)
    """
    logger: Optional[DreamDiaryLogger] = ctx.obj.get("logger")
    verbose: bool = ctx.obj.get("verbose", False)

    context = {"operation": operation}
    if additional_context:
        context.update(additional_context)

    error_msg = safe_logger(logger).log_cli_error(error, context, show_traceback=verbose)

    click.echo(error_msg, err=True)
    sys.exit(exit_code)


class NullLogger:
    """
    Null Object logger implementing the DreamDiaryLogger interface.

    Lets code call logger methods unconditionally.
    """

    def log_operation(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_debug(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_info(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_warning(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        pass

    def log_cli_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
        show_traceback: bool = False,
    ) -> str:
        return f"❌ {type(error).__name__}: {error}"


_null_logger = NullLogger()


def safe_logger(logger: Optional[DreamDiaryLogger]) -> DreamDiaryLogger:
    """
    Return the provided logger or the shared NullLogger if None.

    Use ``safe_logger(logger).log_info("message")`` instead of guarding
    every call with ``if logger:``.
    """
    return logger if logger is not None else _null_logger  # type: ignore[return-value]
