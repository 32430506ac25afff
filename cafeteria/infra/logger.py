"""
Logging for the cafeteria council toolkit.

This module configures the loggers that record every critical
operation: approval workflow transitions, item registrations, database
operations and file imports.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional

from cafeteria.config import LOGS_DIR as _LOGS_DIR


# Global switch for logging (CAFETERIA_LOGGING=1 turns it on)
ENABLE_LOGGING = os.environ.get("CAFETERIA_LOGGING", "0") == "1"
# Global switch for console output (CAFETERIA_OUTPUT=1 turns it on)
ENABLE_OUTPUT = os.environ.get("CAFETERIA_OUTPUT", "0") == "1"

def print_system(*args, **kwargs):
    """Print controlled by ENABLE_OUTPUT."""
    if ENABLE_OUTPUT:
        print(*args, **kwargs)

# Base logger configuration
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """
    Configure a logger that writes to its own file.

    Args:
        name: Logger name
        log_file: Path of the log file
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Drop handlers left by a previous setup
    while logger.handlers:
        logger.removeHandler(logger.handlers[0])

    # File is only created on the first record
    file_handler = logging.FileHandler(log_file, encoding='utf-8', delay=True)
    file_handler.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    file_handler.setFormatter(formatter)

    logger.addHandler(file_handler)

    return logger

LOGS_DIR = Path(_LOGS_DIR)

LOG_FILES = {
    "transactions": LOGS_DIR / "transactions.log",
    "workflow": LOGS_DIR / "workflow.log",
    "database": LOGS_DIR / "database.log",
    "system": LOGS_DIR / "system.log",
}

# One logger per concern
transaction_logger = setup_logger('cafeteria.transactions', str(LOG_FILES["transactions"]))

workflow_logger = setup_logger('cafeteria.workflow', str(LOG_FILES["workflow"]))

database_logger = setup_logger('cafeteria.database', str(LOG_FILES["database"]))

system_logger = setup_logger('cafeteria.system', str(LOG_FILES["system"]))

def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """
    Record a complete transaction.

    Args:
        operation: Operation name (committee_approve, register_item, ...)
        data: Transaction input
        result: Operation result (optional)
        error: Error message (optional)
    """
    if not ENABLE_LOGGING:
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")

def log_workflow(action: str, item_id: str, from_state: Optional[str] = None, to_state: Optional[str] = None, **kwargs) -> None:
    """
    Record an approval workflow step.

    Args:
        action: Transition or queue action (committee_approve, list, ...)
        item_id: Inventory item id
        from_state: State before the transition
        to_state: State after the transition
        **kwargs: Extra data
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "action": action,
        "item_id": item_id,
        "from": from_state,
        "to": to_state,
        **kwargs
    }
    workflow_logger.info(f"WORKFLOW_{action.upper()}: {log_data}")

def log_database_operation(table: str, operation: str, affected_rows: int = 0, **kwargs) -> None:
    """
    Record a database operation.

    Args:
        table: Table name
        operation: SQL operation (INSERT, UPDATE, SELECT, ...)
        affected_rows: Number of affected rows
        **kwargs: Extra data
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "table": table,
        "operation": operation,
        "affected_rows": affected_rows,
        **kwargs
    }
    database_logger.info(f"DB_{operation}: {log_data}")

def log_system_event(event: str, details: Dict[str, Any] = None, level: str = "info") -> None:
    """
    Record a system event.

    Args:
        event: Event description
        details: Extra details (optional)
        level: Log level (info, warning, error)
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "event": event,
        "details": details or {}
    }
    log_method = getattr(system_logger, level.lower(), system_logger.info)
    log_method(f"SYSTEM_EVENT: {event} - {log_data}")

def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **kwargs) -> None:
    """
    Record a file import/export.

    Args:
        operation: Operation type (import, export)
        file_path: File path
        rows_processed: Number of rows processed
        **kwargs: Extra data
    """
    if not ENABLE_LOGGING:
        return
    log_data = {
        "operation": operation,
        "file_path": file_path,
        "rows_processed": rows_processed,
        **kwargs
    }
    system_logger.info(f"FILE_{operation.upper()}: {log_data}")

def get_log_summary(log_type: str = "transactions", lines: int = 100) -> str:
    """
    Return the most recent lines of a log.

    Args:
        log_type: Log type (transactions, workflow, database, system)
        lines: Number of lines to return

    Returns:
        Log content as a string
    """
    log_file = LOG_FILES.get(log_type)
    if not log_file or not log_file.exists():
        return f"Log {log_type} not found."

    with open(log_file, 'r', encoding='utf-8') as f:
        all_lines = f.readlines()
    return ''.join(all_lines[-lines:])

