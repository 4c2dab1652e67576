"""
Data shapes exchanged with the Buildable API.

Response shapes are TypedDicts: the backend owns them and the client hands
them back unchanged. Request payloads are dataclasses built per call.
"""

from dataclasses import dataclass, field
from typing import Generic, Literal, NotRequired, TypedDict, TypeVar

from .errors import APIError, utc_timestamp

TaskStatus = Literal["pending", "in_progress", "completed"]
ProjectStatus = Literal["planning", "in_progress", "completed", "paused"]
Difficulty = Literal["easy", "medium", "hard"]
Urgency = Literal["low", "medium", "high"]
ConnectionStatus = Literal["connected", "working", "disconnected"]

# ============================================
# Responses
# ============================================


class ProjectInfo(TypedDict):
    id: str
    title: str
    description: str
    status: ProjectStatus
    created_at: str
    updated_at: str


class ProjectPlan(TypedDict):
    overview: str
    technology_stack: list[str]
    architecture: str
    timeline: str
    requirements: list[str]
    technical_specifications: str


class TaskSummary(TypedDict):
    id: str
    title: str
    description: str
    status: TaskStatus
    phase: str
    difficulty: Difficulty
    estimated_hours: float
    technologies: list[str]
    dependencies: list[str]
    files_to_modify: list[str]
    acceptance_criteria: list[str]
    # Execution hints for autonomous agents
    context_summary: NotRequired[str]
    commands: NotRequired[list[str]]
    reference_impl: NotRequired[str]
    rollback_plan: NotRequired[str]
    success_checks: NotRequired[list[str]]
    estimated_tokens: NotRequired[int]
    skill_tags: NotRequired[list[str]]


class TaskCounts(TypedDict):
    total: int
    completed: int
    in_progress: int
    pending: int
    summary: list[TaskSummary]


class ActivityContext(TypedDict):
    recent_activity: list[str]
    current_phase: str
    next_priorities: list[str]


class ProjectContext(TypedDict):
    project: ProjectInfo
    plan: ProjectPlan
    tasks: TaskCounts
    context: ActivityContext


class NextTaskContext(TypedDict):
    phase: str
    dependencies_met: bool
    recommended_approach: str
    related_files: list[str]


class NextTaskResponse(TypedDict):
    success: bool
    message: str
    task: NotRequired[TaskSummary]
    context: NotRequired[NextTaskContext]


class TaskGuidance(TypedDict):
    step_by_step: list[str]
    key_considerations: list[str]
    testing_requirements: list[str]
    documentation_needs: list[str]


class StartTaskResponse(TypedDict):
    success: bool
    task_id: str
    message: str
    started_at: str
    guidance: NotRequired[TaskGuidance]


class ProgressResponse(TypedDict):
    success: bool
    message: str
    updated_at: str
    overall_progress: float
    next_suggestions: NotRequired[list[str]]


class CompletedTaskSummary(TypedDict):
    title: str
    time_spent: float
    files_modified: list[str]
    impact: str


class NextTaskSuggestion(TypedDict):
    id: str
    title: str
    reason: str


class CompleteTaskResponse(TypedDict):
    success: bool
    message: str
    completed_at: str
    task_summary: CompletedTaskSummary
    next_task_suggestion: NotRequired[NextTaskSuggestion]


class DiscussionResponse(TypedDict):
    success: bool
    discussion_id: str
    status: Literal["pending", "responded", "resolved"]
    created_at: str
    estimated_response_time: NotRequired[str]
    ai_response: NotRequired[str]
    follow_up_questions: NotRequired[list[str]]


class HealthStatus(TypedDict):
    status: str
    timestamp: str


class ConnectionInfo(TypedDict):
    status: str
    connected_at: str
    last_activity_at: str


# ============================================
# Request payloads
# ============================================


@dataclass(frozen=True)
class ProgressUpdate:
    progress: float  # 0-100
    status_update: str
    completed_steps: list[str] | None = None
    current_step: str | None = None
    challenges: list[str] | None = None
    time_spent: float | None = None  # minutes
    files_modified: list[str] | None = None
    notes: str | None = None


@dataclass(frozen=True)
class CompleteTaskRequest:
    completion_notes: str
    files_modified: list[str] = field(default_factory=list)
    testing_completed: bool = False
    documentation_updated: bool = False
    time_spent: float = 0  # minutes
    challenges_faced: list[str] | None = None
    lessons_learned: list[str] | None = None
    next_recommendations: list[str] | None = None


@dataclass(frozen=True)
class DiscussionContext:
    current_task_id: str | None = None
    related_files: list[str] | None = None
    specific_challenge: str | None = None
    urgency: Urgency | None = None


@dataclass(frozen=True)
class CreateDiscussionRequest:
    topic: str
    message: str
    context: DiscussionContext | None = None


# ============================================
# Envelope
# ============================================

T = TypeVar("T")


@dataclass(frozen=True)
class ResponseEnvelope(Generic[T]):
    """Outcome of one API call.

    `data` is set if and only if `success` is true; `error` only when it
    is false.
    """

    success: bool
    data: T | None = None
    error: APIError | None = None
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        if self.success and (self.data is None or self.error is not None):
            raise ValueError("Successful envelope requires data and no error")
        if not self.success and (self.data is not None or self.error is None):
            raise ValueError("Failed envelope requires an error and no data")

    @classmethod
    def ok(cls, data: T) -> "ResponseEnvelope[T]":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, error: APIError) -> "ResponseEnvelope[T]":
        return cls(success=False, error=error)
