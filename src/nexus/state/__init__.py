from nexus.state.filetree import (
    FileNode,
    FileTreeError,
    FolderNode,
    Node,
    Tree,
    find_or_create,
    find_path_of,
    lookup,
    update_content,
)
from nexus.state.session import AppState, LogEntry, Session

__all__ = [
    "AppState",
    "FileNode",
    "FileTreeError",
    "FolderNode",
    "LogEntry",
    "Node",
    "Session",
    "Tree",
    "find_or_create",
    "find_path_of",
    "lookup",
    "update_content",
]
