"""Service layer: viewer projections, reconciliation and integrations."""

from .feed import SurveyFeed, build_projection
from .groups import (
    AlreadyMemberError,
    GroupError,
    GroupManager,
    GroupNotFoundError,
    GroupPermissionError,
    UserNotFoundError,
)
from .notifications import Notice, NoticeLevel, Notifier
from .preferences import PreferenceStore
from .reconciler import MutationReconciler, MutationResult, MutationStatus
from .suggestions import (
    GeneratorDisabledError,
    MalformedSuggestionError,
    QuotaExceededError,
    RateLimitedError,
    SuggestionBridge,
    SuggestionError,
    get_suggestion_bridge,
)
from .surveys import SurveyValidationError, create_survey, publish_suggestion

__all__ = [
    "AlreadyMemberError",
    "GeneratorDisabledError",
    "GroupError",
    "GroupManager",
    "GroupNotFoundError",
    "GroupPermissionError",
    "MalformedSuggestionError",
    "MutationReconciler",
    "MutationResult",
    "MutationStatus",
    "Notice",
    "NoticeLevel",
    "Notifier",
    "PreferenceStore",
    "QuotaExceededError",
    "RateLimitedError",
    "SuggestionBridge",
    "SuggestionError",
    "SurveyFeed",
    "SurveyValidationError",
    "UserNotFoundError",
    "build_projection",
    "create_survey",
    "get_suggestion_bridge",
    "publish_suggestion",
]
