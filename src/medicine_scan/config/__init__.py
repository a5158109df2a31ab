# ============================================================================
# src/medicine_scan/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .base_config import base_settings, BaseSettingsConfig
from .vision_config import vision_settings, VisionSettings
from .logging_config import logging_settings, LoggingSettings
