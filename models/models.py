from sqlalchemy.orm import declarative_base
from sqlalchemy import *

from models.entities import PRStatus


Base = declarative_base()


class Team(Base):
    __tablename__ = 'teams'

    team_name = Column(String(255), primary_key=True)


class User(Base):
    __tablename__ = 'users'

    user_id = Column(String(255), primary_key=True)
    username = Column(String(255), nullable=False)
    team_name = Column(String(255), ForeignKey('teams.team_name'), nullable=False, index=True)
    is_active = Column(Boolean(), nullable=False, default=True)

    __table_args__ = (
        Index('ix_users_team_active', 'team_name', 'is_active'),
    )


class PullRequest(Base):
    __tablename__ = 'pull_requests'

    pull_request_id = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)
    author_id = Column(String(255), ForeignKey('users.user_id'), nullable=False, index=True)
    status = Column(String(16), nullable=False, default=PRStatus.OPEN.value)
    created_at = Column(DateTime(timezone=True), nullable=False)
    merged_at = Column(DateTime(timezone=True), nullable=True)


class Reviewers(Base):
    __tablename__ = 'pr_reviewers'

    pr_id = Column(String(255), ForeignKey('pull_requests.pull_request_id'), nullable=False)
    reviewer_id = Column(String(255), ForeignKey('users.user_id'), nullable=False, index=True)

    __table_args__ = (
        PrimaryKeyConstraint('pr_id', 'reviewer_id'),
    )
