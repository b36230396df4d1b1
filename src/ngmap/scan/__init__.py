"""Source file discovery."""

from ngmap.scan.files import ScanResult, is_test_file, scan_source_files

__all__ = ["ScanResult", "is_test_file", "scan_source_files"]
