# cafeteria/config.py
"""
Global settings and default values for the cafeteria council toolkit.
"""

import os
from dataclasses import dataclass


# Default SQLite database path (override with CAFETERIA_DB)
DB_PATH = os.environ.get("CAFETERIA_DB") or os.path.join(os.getcwd(), "cafeteria.db")

# Directory for log files (override with CAFETERIA_LOG_DIR)
LOGS_DIR = os.environ.get("CAFETERIA_LOG_DIR") or os.path.join(os.getcwd(), "logs")


@dataclass
class DefaultConfig:
    """Constants used by the stock forecast."""
    meals_per_day: int = 3          # breakfast, lunch, dinner
    days_per_week: int = 7
    critical_ratio: float = 0.3     # share of min_stock_level below which stock is critical
    warning_days: int = 7           # projected days at or below which stock is a warning


# Global instance with the default values
DEFAULTS = DefaultConfig()
