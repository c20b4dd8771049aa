"""
Application Configuration

This file contains the default configuration settings for HostSwitch.
It follows a modular approach to keep settings organized and easy to manage.
Values here are the lowest-priority layer read by ConfigManager.
"""

import os

from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

# --- Application Metadata ---
APP_NAME = "HostSwitch"
APP_VERSION = "0.1.0"

# --- Logging ---
# Level and file can be overridden from the environment (or .env).
LOGGING = {
    "level": os.getenv("HOSTSWITCH_LOG_LEVEL", "INFO"),
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    # Empty string disables the file handler
    "file": os.getenv("HOSTSWITCH_LOG_FILE", ""),
}

# --- State Synchronization ---
SYNC = {
    # Ignore the result of a reload if a newer reload was issued after it
    "discard_stale_reloads": True,
}

# --- Notifications ---
NOTIFICATIONS = {
    "default_duration_ms": 3000,
}

# --- Backups ---
BACKUPS = {
    "preview_max_lines": 10,
}
