"""Directory scanning for snapdiff."""

from .discovery import DirectoryScanner
from .errors import ScanError
from .models import ScanResult

__all__ = ["DirectoryScanner", "ScanError", "ScanResult"]
