"""
Event domain object for modulehub.

Events are change notifications emitted by a ModuleManager when its
observable state changes:
- remote_refs_changed: a refresh fetched a new ref list
- local_versions_changed: a cache scan or removal changed the local index

Presentation layers subscribe to these instead of polling.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict
import json

REMOTE_REFS_CHANGED = 'remote_refs_changed'
LOCAL_VERSIONS_CHANGED = 'local_versions_changed'


@dataclass
class ManagerEvent:
    """
    Something that changed in a module manager.

    Attributes:
        type: Event type (remote_refs_changed, local_versions_changed)
        repository: Repository URL of the emitting manager
        timestamp: When the change happened
        data: Type-specific data (ref names, counts)
    """

    type: str
    repository: str
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': self.type,
            'repository': self.repository,
            'timestamp': self.timestamp.isoformat(),
            'data': self.data,
        }

    def to_jsonl(self) -> str:
        """Convert to single-line JSON for streaming output."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return f"{self.type} for {self.repository} at {self.timestamp.isoformat()}"
