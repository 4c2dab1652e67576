"""
Buildable API client.

One authenticated httpx.AsyncClient per instance. Every method issues a
single request and returns the decoded JSON body; failures surface as
APIError. Status-changing methods follow up with a best-effort heartbeat
to the connection tracker.
"""

import logging
import time
import uuid
from typing import Any, cast

import httpx

from . import __version__
from .config import BuildableConfig, ClientOptions
from .errors import APIError, utc_timestamp
from .types import (
    CompleteTaskRequest,
    CompleteTaskResponse,
    ConnectionInfo,
    ConnectionStatus,
    CreateDiscussionRequest,
    DiscussionResponse,
    HealthStatus,
    NextTaskResponse,
    ProgressResponse,
    ProgressUpdate,
    ProjectContext,
    ResponseEnvelope,
    StartTaskResponse,
)

CONNECTION_CAPABILITIES = ("task_management", "progress_tracking", "discussions")


def _compact(body: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {key: value for key, value in body.items() if value is not None}


def _error_from_response(exc: httpx.HTTPStatusError) -> APIError:
    """Normalize a non-2xx response, preferring the server's own message."""
    message = str(exc) or "Unknown API error"
    code = None
    details = None
    try:
        body = exc.response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("error") or body.get("message") or message
        code = body.get("code")
        details = body.get("details")

    return APIError(
        str(message),
        code=code,
        details=details,
        status_code=exc.response.status_code,
    )


class BuildableClient:
    """Typed client for the Buildable project API."""

    def __init__(
        self,
        config: BuildableConfig,
        options: ClientOptions | None = None,
        *,
        logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.options = options or ClientOptions()
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.ai_assistant_id = (
            config.ai_assistant_id or f"ai_{uuid.uuid4().hex[:8]}"
        )

        self._http = httpx.AsyncClient(
            base_url=config.api_url.rstrip("/"),
            timeout=config.timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "X-AI-Assistant-ID": self.ai_assistant_id,
                "Content-Type": "application/json",
                "User-Agent": f"buildable-mcp/{__version__}",
            },
        )

        self.logger.info(
            "Buildable client initialized for project %s (assistant %s)",
            config.project_id,
            self.ai_assistant_id,
        )

    async def __aenter__(self) -> "BuildableClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    @property
    def headers(self) -> httpx.Headers:
        """Headers sent with every request."""
        return self._http.headers

    # ============================================
    # Project
    # ============================================

    async def get_project_context(self) -> ProjectContext:
        """Get the project with its plan, task counts and recent activity."""
        self.logger.debug("Fetching project context")
        response = await self._request(
            "GET", f"/projects/{self.config.project_id}/context"
        )
        self.logger.info("Retrieved project context")
        return cast(ProjectContext, response.data)

    async def get_next_task(self) -> NextTaskResponse:
        """
        Get the next recommended task.

        A response without a `task` key means nothing is available; that is
        not an error.
        """
        self.logger.debug("Fetching next task")
        response = await self._request(
            "GET", f"/projects/{self.config.project_id}/next-task"
        )
        result = cast(NextTaskResponse, response.data)

        task = result.get("task")
        if task:
            self.logger.info("Next task: %s", task.get("title"))
        else:
            self.logger.info("No tasks available: %s", result.get("message"))
        return result

    # ============================================
    # Task lifecycle
    # ============================================

    async def start_task(
        self,
        task_id: str,
        *,
        approach: str | None = None,
        estimated_duration: float | None = None,
        notes: str | None = None,
    ) -> StartTaskResponse:
        """
        Start working on a task.

        Args:
            task_id: Task to start
            approach: Strategy the assistant intends to follow
            estimated_duration: Expected duration in minutes
            notes: Free-form notes

        Returns:
            Start confirmation, possibly with step-by-step guidance
        """
        self.logger.debug("Starting task %s", task_id)
        body = {
            "ai_assistant_id": self.ai_assistant_id,
            "estimated_time_minutes": estimated_duration,
            "notes": notes,
            "approach": approach,
        }
        response = await self._request("POST", f"/tasks/{task_id}/start", json=body)
        self.logger.info("Started task %s", task_id)

        await self._update_connection_status("working", task_id)
        return cast(StartTaskResponse, response.data)

    async def update_progress(
        self, task_id: str, update: ProgressUpdate
    ) -> ProgressResponse:
        """
        Report progress on a task.

        `files_modified` is sent as both created and modified files, and
        `challenges` as blockers. `status_update` is not transmitted.
        """
        self.logger.debug("Updating progress for task %s: %s%%", task_id, update.progress)
        body = {
            "completion_percentage": update.progress,
            "files_created": update.files_modified,
            "files_modified": update.files_modified,
            "notes": update.notes,
            "blockers": update.challenges,
            "time_spent_minutes": update.time_spent,
            "current_step": update.current_step,
            "completed_steps": update.completed_steps,
        }
        response = await self._request(
            "POST", f"/tasks/{task_id}/progress", json=body
        )
        self.logger.info("Progress updated: %s%% complete", update.progress)

        await self._update_connection_status("working", task_id)
        return cast(ProgressResponse, response.data)

    async def complete_task(
        self, task_id: str, completion: CompleteTaskRequest
    ) -> CompleteTaskResponse:
        """Mark a task complete and return the assistant to idle."""
        self.logger.debug("Completing task %s", task_id)
        body = {
            "files_created": completion.files_modified,
            "files_modified": completion.files_modified,
            "completion_notes": completion.completion_notes,
            "time_spent_minutes": completion.time_spent,
            "verification_evidence": (
                "Tests passed" if completion.testing_completed else None
            ),
        }
        response = await self._request(
            "POST", f"/tasks/{task_id}/complete", json=body
        )
        self.logger.info("Completed task %s", task_id)

        await self._update_connection_status("connected")
        return cast(CompleteTaskResponse, response.data)

    # ============================================
    # Discussions
    # ============================================

    async def create_discussion(
        self, request: CreateDiscussionRequest
    ) -> DiscussionResponse:
        """Open a question for a human. Urgency defaults to medium."""
        self.logger.debug("Creating discussion: %s", request.topic)
        context = request.context
        urgency = (context.urgency if context else None) or "medium"
        body = {
            "type": "question",
            "title": request.topic,
            "message": request.message,
            "context": _compact(
                {
                    "task_id": context.current_task_id if context else None,
                    "relevant_files": context.related_files if context else None,
                    "specific_challenge": (
                        context.specific_challenge if context else None
                    ),
                    "urgency": urgency,
                }
            ),
            "urgency": urgency,
            "requires_human_response": True,
            "created_by": self.ai_assistant_id,
        }
        response = await self._request(
            "POST", f"/projects/{self.config.project_id}/discuss", json=body
        )
        result = cast(DiscussionResponse, response.data)
        self.logger.info("Discussion created: %s", result.get("discussion_id"))
        return result

    # ============================================
    # Connectivity
    # ============================================

    async def health_check(self) -> HealthStatus:
        """Check that the API is reachable."""
        response = await self._request("GET", "/health")
        self.logger.debug("Health check passed")
        return cast(HealthStatus, response.data)

    async def connect(self) -> None:
        """Register this assistant as connected. Never raises."""
        self.logger.info("Connecting to Buildable")
        await self._update_connection_status("connected")

    async def disconnect(self) -> None:
        """Register this assistant as disconnected. Never raises."""
        self.logger.info("Disconnecting from Buildable")
        await self._update_connection_status("disconnected")

    async def get_connection_status(self) -> ConnectionInfo:
        """
        Look up this assistant's connection record.

        Returns status "disconnected" when no record exists and "unknown"
        when the lookup itself fails.
        """
        try:
            response = await self._request(
                "GET", f"/projects/{self.config.project_id}/ai-connections"
            )
        except APIError as e:
            self.logger.warning("Failed to get connection status: %s", e)
            return {"status": "unknown", "connected_at": "", "last_activity_at": ""}

        data = response.data if isinstance(response.data, dict) else {}
        for conn in data.get("connections") or []:
            if conn.get("ai_assistant_id") == self.ai_assistant_id:
                return {
                    "status": conn.get("status", "unknown"),
                    "connected_at": conn.get("connected_at", ""),
                    "last_activity_at": conn.get("last_activity_at", ""),
                }
        return {"status": "disconnected", "connected_at": "", "last_activity_at": ""}

    # ============================================
    # Internals
    # ============================================

    async def _send(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> ResponseEnvelope[Any]:
        """Issue one request and report the outcome as an envelope.

        Transport failures, non-2xx statuses and non-JSON bodies come back
        as failed envelopes carrying a normalized APIError. A JSON null
        body is returned as an empty dict.
        """
        start = time.monotonic()
        try:
            response = await self._http.request(
                method, path, json=_compact(json) if json is not None else None
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            error = _error_from_response(e)
            error.__cause__ = e
            return self._failed(method, path, start, error)
        except httpx.RequestError as e:
            error = APIError(str(e) or "Unknown API error")
            error.__cause__ = e
            return self._failed(method, path, start, error)
        except ValueError as e:
            error = APIError(
                "Invalid JSON in API response",
                code="invalid_response",
                status_code=response.status_code,
            )
            error.__cause__ = e
            return self._failed(method, path, start, error)

        self.logger.debug(
            "%s %s completed in %.0fms", method, path, (time.monotonic() - start) * 1000
        )
        return ResponseEnvelope.ok(body if body is not None else {})

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> ResponseEnvelope[Any]:
        """Issue one request for a primary operation.

        Raises:
            APIError: On network failure, non-2xx status or a non-JSON body
        """
        response = await self._send(method, path, json=json)
        if not response.success:
            self.logger.error("%s %s failed: %s", method, path, response.error)
            raise response.error
        return response

    def _failed(
        self, method: str, path: str, start: float, error: APIError
    ) -> ResponseEnvelope[Any]:
        self.logger.debug(
            "%s %s failed after %.0fms", method, path, (time.monotonic() - start) * 1000
        )
        return ResponseEnvelope.failed(error)

    async def _update_connection_status(
        self, status: ConnectionStatus, current_task_id: str | None = None
    ) -> None:
        """Post a heartbeat. Failures of any kind are logged and swallowed."""
        body = _compact(
            {
                "ai_assistant_id": self.ai_assistant_id,
                "status": status,
                "current_task_id": current_task_id,
                "metadata": {
                    "client_version": __version__,
                    "capabilities": list(CONNECTION_CAPABILITIES),
                    "last_activity": utc_timestamp(),
                },
            }
        )
        try:
            response = await self._send("POST", "/internal/ai-connections", json=body)
        except Exception as e:
            # e.g. RuntimeError from an already-closed httpx client
            self.logger.debug("Connection status update failed (non-critical): %s", e)
            return

        if not response.success:
            self.logger.debug(
                "Connection status update failed (non-critical): %s", response.error
            )


def create_client(
    config: BuildableConfig,
    options: ClientOptions | None = None,
    **kwargs: Any,
) -> BuildableClient:
    """Create a client; keyword arguments are passed to BuildableClient."""
    return BuildableClient(config, options, **kwargs)
