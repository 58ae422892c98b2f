from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace
from typing import Any, Literal

NodeType = Literal["file", "folder"]


class FileTreeError(ValueError):
    """Raised when a record cannot be converted into a tree node."""


@dataclass(frozen=True, slots=True)
class FileNode:
    name: str
    content: str = ""

    @property
    def type(self) -> NodeType:
        return "file"


@dataclass(frozen=True, slots=True)
class FolderNode:
    name: str
    children: tuple[Node, ...] = ()

    @property
    def type(self) -> NodeType:
        return "folder"


Node = FileNode | FolderNode
Tree = tuple[Node, ...]


def split_path(path: str) -> list[str]:
    """Split a slash-separated path, dropping empty segments."""
    return [part for part in path.split("/") if part]


def _first_folder(nodes: Sequence[Node], name: str) -> int | None:
    for index, node in enumerate(nodes):
        if isinstance(node, FolderNode) and node.name == name:
            return index
    return None


def _first_file(nodes: Sequence[Node], name: str) -> int | None:
    for index, node in enumerate(nodes):
        if isinstance(node, FileNode) and node.name == name:
            return index
    return None


def lookup(root: Sequence[Node], path: str) -> Node | None:
    parts = split_path(path)
    if not parts:
        return None

    level: Sequence[Node] = root
    for part in parts[:-1]:
        index = _first_folder(level, part)
        if index is None:
            return None
        folder = level[index]
        assert isinstance(folder, FolderNode)
        level = folder.children

    for node in level:
        if node.name == parts[-1]:
            return node
    return None


def _updated_level(
    level: Tree, parts: list[str], content: str
) -> tuple[Tree, FileNode | None]:
    head, tail = parts[0], parts[1:]
    if not tail:
        index = _first_file(level, head)
        if index is None:
            return level, None
        current = level[index]
        assert isinstance(current, FileNode)
        updated = replace(current, content=content)
        return level[:index] + (updated,) + level[index + 1 :], updated

    index = _first_folder(level, head)
    if index is None:
        return level, None
    folder = level[index]
    assert isinstance(folder, FolderNode)
    children, updated = _updated_level(folder.children, tail, content)
    if updated is None:
        return level, None
    return level[:index] + (replace(folder, children=children),) + level[index + 1 :], updated


def update_content(root: Tree, path: str, new_content: str) -> tuple[Tree, FileNode | None]:
    """Return a new revision with one file's content replaced.

    Only the nodes from the root down to the updated file are rebuilt; every
    other subtree is shared with ``root``. On a miss the original ``root`` is
    returned as-is together with ``None``.
    """
    parts = split_path(path)
    if not parts:
        return root, None
    new_root, updated = _updated_level(root, parts, new_content)
    if updated is None:
        return root, None
    return new_root, updated


def _created_level(level: Tree, folders: list[str], file_name: str, content: str) -> Tree:
    if not folders:
        index = _first_file(level, file_name)
        if index is None:
            return level + (FileNode(name=file_name, content=content),)
        return level[:index] + (replace(level[index], content=content),) + level[index + 1 :]

    head, tail = folders[0], folders[1:]
    index = _first_folder(level, head)
    if index is None:
        created = FolderNode(name=head, children=_created_level((), tail, file_name, content))
        return level + (created,)
    folder = level[index]
    assert isinstance(folder, FolderNode)
    children = _created_level(folder.children, tail, file_name, content)
    return level[:index] + (replace(folder, children=children),) + level[index + 1 :]


def find_or_create(root: Sequence[Node], path: str, content: str) -> Tree:
    """Create or overwrite the file at ``path``, creating missing folders in order.

    The input tree is never modified. Existing folders are matched by folder
    type and existing files by file type, so a file and a folder may share a
    name within one level. When the folder comes first, ``lookup`` resolves
    that name to the folder.
    """
    parts = split_path(path)
    if not parts:
        return tuple(root)
    *folders, file_name = parts
    return _created_level(tuple(root), folders, file_name, content)


def find_path_of(root: Sequence[Node], target: Node, prefix: str = "") -> str | None:
    """Reverse lookup by node identity, not by value."""
    for node in root:
        path = f"{prefix}/{node.name}" if prefix else node.name
        if node is target:
            return path
        if isinstance(node, FolderNode):
            found = find_path_of(node.children, target, path)
            if found is not None:
                return found
    return None


def walk(root: Sequence[Node], prefix: str = "") -> Iterator[tuple[str, Node]]:
    for node in root:
        path = f"{prefix}/{node.name}" if prefix else node.name
        yield path, node
        if isinstance(node, FolderNode):
            yield from walk(node.children, path)


def file_names(root: Sequence[Node]) -> list[str]:
    return [node.name for node in root]


def to_records(root: Sequence[Node]) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for node in root:
        if isinstance(node, FileNode):
            records.append({"name": node.name, "type": "file", "content": node.content})
        else:
            records.append(
                {"name": node.name, "type": "folder", "children": to_records(node.children)}
            )
    return records


def from_records(records: Sequence[dict[str, Any]]) -> Tree:
    nodes: list[Node] = []
    for record in records:
        if not isinstance(record, dict):
            raise FileTreeError(f"Tree record must be an object, got {type(record).__name__}.")
        name = record.get("name")
        if not isinstance(name, str) or not name:
            raise FileTreeError(f"Tree record is missing a name: {record!r}")
        node_type = record.get("type")
        if node_type == "file":
            nodes.append(FileNode(name=name, content=str(record.get("content") or "")))
        elif node_type == "folder":
            children = record.get("children") or []
            if not isinstance(children, list):
                raise FileTreeError(f"Folder '{name}' children must be a list.")
            nodes.append(FolderNode(name=name, children=from_records(children)))
        else:
            raise FileTreeError(f"Unsupported node type for '{name}': {node_type!r}")
    return tuple(nodes)


def render(root: Sequence[Node], indent: str = "") -> str:
    lines: list[str] = []
    for node in root:
        if isinstance(node, FolderNode):
            lines.append(f"{indent}{node.name}/")
            nested = render(node.children, indent + "  ")
            if nested:
                lines.append(nested)
        else:
            lines.append(f"{indent}{node.name}")
    return "\n".join(lines)
