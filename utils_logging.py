"""
Logging Utilities - Pricing Scout
=================================
Level-gated console logging shared by every pipeline stage.
"""

from typing import Dict

# Log levels
LOG_LEVEL_SILENT = 0
LOG_LEVEL_ERROR = 1
LOG_LEVEL_INFO = 2
LOG_LEVEL_DEBUG = 3

LOG_LEVEL_NAMES: Dict[str, int] = {
    "silent": LOG_LEVEL_SILENT,
    "error": LOG_LEVEL_ERROR,
    "info": LOG_LEVEL_INFO,
    "debug": LOG_LEVEL_DEBUG,
}

# Global log level (can be set from config)
CURRENT_LOG_LEVEL = LOG_LEVEL_INFO


def set_log_level(level):
    """Set global log level. Accepts a level constant or a name from config."""
    global CURRENT_LOG_LEVEL
    if isinstance(level, str):
        level = LOG_LEVEL_NAMES.get(level.strip().lower(), LOG_LEVEL_INFO)
    CURRENT_LOG_LEVEL = level


def get_log_level() -> int:
    return CURRENT_LOG_LEVEL


def log_error(msg: str):
    """Printed unless logging is silenced."""
    if CURRENT_LOG_LEVEL >= LOG_LEVEL_ERROR:
        print(f"❌ {msg}")


def log_warning(msg: str):
    """Degradations the pipeline recovers from."""
    if CURRENT_LOG_LEVEL >= LOG_LEVEL_ERROR:
        print(f"⚠️ {msg}")


def log_info(msg: str):
    """Printed at INFO level and above."""
    if CURRENT_LOG_LEVEL >= LOG_LEVEL_INFO:
        print(msg)


def log_debug(msg: str):
    """Only printed at DEBUG level."""
    if CURRENT_LOG_LEVEL >= LOG_LEVEL_DEBUG:
        print(f"   🔍 {msg}")
