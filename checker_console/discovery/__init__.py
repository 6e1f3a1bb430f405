"""Discovery package: locate the checker binary and its result artifacts."""

from checker_console.discovery.binary import BinaryLocator
from checker_console.discovery.output_dir import OutputDirResolver

__all__ = ["BinaryLocator", "OutputDirResolver"]
