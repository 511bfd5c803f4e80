from typing import Optional


class DomainError(ValueError):
    """Base class for failures the API reports with a dedicated error code"""

    code = "INTERNAL_ERROR"
    message = "internal error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    message = "resource not found"


class TeamExistsError(DomainError):
    code = "TEAM_EXISTS"
    message = "team_name already exists"


class PRExistsError(DomainError):
    code = "PR_EXISTS"
    message = "PR id already exists"


class PRMergedError(DomainError):
    code = "PR_MERGED"
    message = "cannot reassign on merged PR"


class NotAssignedError(DomainError):
    code = "NOT_ASSIGNED"
    message = "reviewer is not assigned to this PR"


class NoCandidateError(DomainError):
    code = "NO_CANDIDATE"
    message = "no active replacement candidate in team"
