"""
Core data models for scm-providers.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class BranchInfo:
    """
    A branch reported by a hosting service.

    Attributes:
        name: Branch name, without any ``refs/heads/`` prefix
        commit_id: Commit the branch points at, or None if the vendor omits it
    """
    name: str
    commit_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {'name': self.name, 'commit_id': self.commit_id}


@dataclass(frozen=True)
class TagInfo:
    """
    A tag reported by a hosting service.

    Attributes:
        name: Tag name, without any ``refs/tags/`` prefix
        commit_id: Commit (or tag object) id, or None if the vendor omits it
    """
    name: str
    commit_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {'name': self.name, 'commit_id': self.commit_id}


@dataclass
class Page:
    """One page of a listing: the raw records plus the URL of the next page."""
    items: List[Any] = field(default_factory=list)
    next_url: Optional[str] = None

    @property
    def is_last(self) -> bool:
        return self.next_url is None
