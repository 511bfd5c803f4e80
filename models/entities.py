import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


class PRStatus(str, enum.Enum):
    OPEN = "OPEN"
    MERGED = "MERGED"


@dataclass(frozen=True)
class Team:
    name: str


@dataclass(frozen=True)
class User:
    user_id: str
    username: str
    team_name: str
    is_active: bool = True


@dataclass
class PullRequest:
    pull_request_id: str
    name: str
    author_id: str
    status: PRStatus = PRStatus.OPEN
    reviewers: List[User] = field(default_factory=list)
    created_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None

    @property
    def reviewer_ids(self) -> List[str]:
        return [reviewer.user_id for reviewer in self.reviewers]

    @property
    def is_merged(self) -> bool:
        return self.status == PRStatus.MERGED
