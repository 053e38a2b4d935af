from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

ROOT_ID = "root"
ROOT_TITLE = "Root"
UNTITLED_FOLDER = "Untitled Folder"
UNTITLED_LINK = "Untitled Link"


class NodeType(str, Enum):
    FOLDER = "folder"
    LINK = "link"


@dataclass
class BookmarkNode:
    id: str
    title: str
    type: NodeType
    add_date: Optional[int] = None
    last_modified: Optional[int] = None
    url: Optional[str] = None
    parent_id: Optional[str] = None
    children: Optional[List["BookmarkNode"]] = None

    @classmethod
    def folder(
        cls,
        id: str,
        title: str,
        *,
        add_date: Optional[int] = None,
        last_modified: Optional[int] = None,
        parent_id: Optional[str] = None,
    ) -> "BookmarkNode":
        return cls(
            id=id,
            title=title or UNTITLED_FOLDER,
            type=NodeType.FOLDER,
            add_date=add_date,
            last_modified=last_modified,
            parent_id=parent_id,
            children=[],
        )

    @classmethod
    def link(
        cls,
        id: str,
        title: str,
        url: str,
        *,
        add_date: int,
        parent_id: Optional[str] = None,
    ) -> "BookmarkNode":
        return cls(
            id=id,
            title=title or UNTITLED_LINK,
            type=NodeType.LINK,
            add_date=add_date,
            url=url or "",
            parent_id=parent_id,
        )

    @property
    def is_folder(self) -> bool:
        return self.type is NodeType.FOLDER

    @property
    def is_link(self) -> bool:
        return self.type is NodeType.LINK

    def append(self, child: "BookmarkNode") -> None:
        if self.children is None:
            raise TypeError(f"Cannot add children to a {self.type.value} node ({self.id})")
        child.parent_id = self.id
        self.children.append(child)

    def iter_nodes(self) -> Iterator["BookmarkNode"]:
        """Pre-order walk of this node and everything below it.

        Iterative so arbitrarily deep trees do not hit the recursion limit.
        """
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON shape consumed by the dashboard."""
        out = _node_fields(self)
        pending: List[Tuple["BookmarkNode", Dict[str, Any]]] = [(self, out)]
        while pending:
            node, data = pending.pop()
            if node.children is None:
                continue
            data["children"] = []
            for child in node.children:
                child_data = _node_fields(child)
                data["children"].append(child_data)
                pending.append((child, child_data))
        return out


def _node_fields(node: BookmarkNode) -> Dict[str, Any]:
    data: Dict[str, Any] = {"id": node.id, "title": node.title, "type": node.type.value}
    if node.add_date is not None:
        data["addDate"] = node.add_date
    if node.last_modified is not None:
        data["lastModified"] = node.last_modified
    if node.url is not None:
        data["url"] = node.url
    if node.parent_id is not None:
        data["parentId"] = node.parent_id
    return data


@dataclass(frozen=True)
class NamedCount:
    name: str
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class BookmarkStats:
    total_links: int = 0
    total_folders: int = 0
    top_domains: Tuple[NamedCount, ...] = ()
    bookmarks_by_year: Tuple[NamedCount, ...] = ()
    most_recent: Tuple[BookmarkNode, ...] = ()

    @property
    def is_empty(self) -> bool:
        # Callers treat this as "no usable bookmark data found".
        return self.total_links == 0 and self.total_folders == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalLinks": self.total_links,
            "totalFolders": self.total_folders,
            "topDomains": [d.to_dict() for d in self.top_domains],
            "bookmarksByYear": [y.to_dict() for y in self.bookmarks_by_year],
            "mostRecent": [n.to_dict() for n in self.most_recent],
        }


@dataclass
class TreeBuild:
    root: BookmarkNode
    flat_links: List[BookmarkNode] = field(default_factory=list)
    total_links: int = 0
    total_folders: int = 0


@dataclass
class ParseResult:
    root: BookmarkNode
    stats: BookmarkStats
