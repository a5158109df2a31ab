# ============================================================================
# src/medicine_scan/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the medicine scan service.

The extraction pipeline itself never raises these; they belong to the
service boundary (image payloads, model calls, history storage).
"""


class MedicineScanError(Exception):
    """Base exception for all medicine scan errors."""
    pass


class ConfigurationError(MedicineScanError):
    """Invalid or missing configuration."""
    pass


class InvalidImageError(MedicineScanError):
    """Image payload could not be accepted."""
    def __init__(self, message: str, too_large: bool = False):
        super().__init__(message)
        self.too_large = too_large


class SourceError(MedicineScanError):
    """Error from an external text source."""
    pass


class VisionSourceError(SourceError):
    """Vision model call failed or returned no content."""
    pass


class SummarySourceError(SourceError):
    """Summary model call failed or returned nothing usable."""
    pass


class ScanTimeoutError(MedicineScanError):
    """Scan exceeded the overall processing budget."""
    def __init__(self, message: str, timeout: float):
        super().__init__(message)
        self.timeout = timeout


class HistoryStoreError(MedicineScanError):
    """Error reading or writing scan history."""
    pass
