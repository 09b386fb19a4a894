"""Core functionality for dotkeep."""

from .backup import BackupEntry, BackupStore
from .config import Config
from .install import InstallManager
from .paths import DotfilesPaths
from .restore import RestoreManager
from .status import StatusManager
from .wipe import WipeManager

__all__ = [
    "BackupEntry",
    "BackupStore",
    "Config",
    "DotfilesPaths",
    "InstallManager",
    "RestoreManager",
    "StatusManager",
    "WipeManager",
]
