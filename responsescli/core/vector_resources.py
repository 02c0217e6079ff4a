# responsescli/core/vector_resources.py
"""
Knowledge sources for the file search tool.

A VectorResource pairs local documents with the remote file ids and the
vector store they were indexed into. The active resource of the list
(selected by `item_index`) provides the vector store used by requests.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from responsescli.core.errors import ChatStorageError

logger = logging.getLogger(__name__)

RESOURCES_FILENAME = "vector_resources.json"


@dataclass
class VectorResource:
    name: str = ""
    description: str = ""
    github: str = ""
    instructions: str = ""
    files: List[str] = field(default_factory=list)
    # Parallel to `files`; an empty string means "not uploaded yet"
    file_upload_ids: List[str] = field(default_factory=list)
    vector_store_id: str = ""

    def upload_id(self, index: int) -> str:
        if 0 <= index < len(self.file_upload_ids):
            return self.file_upload_ids[index]
        return ""

    def set_upload_id(self, index: int, file_id: str) -> None:
        while len(self.file_upload_ids) < len(self.files):
            self.file_upload_ids.append("")
        self.file_upload_ids[index] = file_id

    def add_file(self, path: str) -> None:
        self.files.append(path)
        self.file_upload_ids.append("")

    def delete_file(self, index: int) -> None:
        """Remove a file together with its upload id."""
        if 0 <= index < len(self.files):
            del self.files[index]
        if 0 <= index < len(self.file_upload_ids):
            del self.file_upload_ids[index]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VectorResource":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class VectorResourceList:
    item_index: int = -1
    resources: List[VectorResource] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.resources)

    @property
    def active(self) -> Optional[VectorResource]:
        if 0 <= self.item_index < len(self.resources):
            return self.resources[self.item_index]
        return None

    @property
    def vector_store_id(self) -> str:
        """Vector store of the active resource, or "" when none is active."""
        return self.active.vector_store_id if self.active else ""

    def add(self, resource: VectorResource) -> VectorResource:
        self.resources.append(resource)
        if self.item_index < 0:
            self.item_index = 0
        return resource

    def select(self, index: int) -> VectorResource:
        if not 0 <= index < len(self.resources):
            raise IndexError(f"No vector resource at index {index}")
        self.item_index = index
        return self.resources[index]

    def find(self, name: str) -> Optional[VectorResource]:
        for resource in self.resources:
            if resource.name == name:
                return resource
        return None

    def delete(self, index: int) -> None:
        if not 0 <= index < len(self.resources):
            return
        del self.resources[index]
        if self.item_index >= len(self.resources):
            self.item_index = len(self.resources) - 1

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_index": self.item_index,
            "resources": [asdict(r) for r in self.resources],
        }

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(self.to_dict(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error(f"Failed to save vector resources: {e}")
            raise ChatStorageError(f"Failed to save vector resources to {path}: {e}") from e

    @classmethod
    def load(cls, path: Union[str, Path]) -> "VectorResourceList":
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load vector resources: {e}")
            raise ChatStorageError(f"Failed to load vector resources from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ChatStorageError(f"Vector resources in {path} are not a JSON object")
        return cls(
            item_index=int(data.get("item_index", -1)),
            resources=[VectorResource.from_dict(r) for r in data.get("resources", []) or []],
        )
