from .filesystem import list_files
from .handle import SourceHandle, is_glob_pattern

__all__ = ["SourceHandle", "is_glob_pattern", "list_files"]
