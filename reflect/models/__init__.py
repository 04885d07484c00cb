from reflect.models.feedback import FeedbackScope, FeedbackType, GoalListType, RetrospectiveFeedback
from reflect.models.retrospective import Retrospective, Sprint, SprintStatus
from reflect.models.sprint_task import SprintTask
from reflect.models.trail import Trail
from reflect.models.user import Team, TeamRole, User, UserTeam

__all__ = [
    "FeedbackScope",
    "FeedbackType",
    "GoalListType",
    "Retrospective",
    "RetrospectiveFeedback",
    "Sprint",
    "SprintStatus",
    "SprintTask",
    "Team",
    "TeamRole",
    "Trail",
    "User",
    "UserTeam",
]
