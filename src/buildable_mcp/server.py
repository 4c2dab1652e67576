"""
Buildable MCP Server - Buildable project tools for AI coding assistants

Bridges MCP stdio to the Buildable HTTP API. Each tool maps to one
BuildableClient call and returns its JSON result as text.

Tools:
- get_project_context: Project, plan, task counts and recent activity
- get_next_task: Next recommended task (or none)
- start_task: Start a task
- update_progress: Report progress on a task
- complete_task: Mark a task complete
- create_discussion: Ask a human a question
- health_check: Check API connectivity

Configuration comes from BUILDABLE_* environment variables (see config.py).
"""

import json
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from .client import BuildableClient
from .config import ConfigurationError, load_config
from .errors import APIError, NotConnectedError
from .types import (
    CompleteTaskRequest,
    CreateDiscussionRequest,
    DiscussionContext,
    ProgressUpdate,
    Urgency,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Shared client, set for the lifetime of the server session
_client: BuildableClient | None = None


@asynccontextmanager
async def _lifespan(server: FastMCP) -> AsyncIterator[BuildableClient]:
    """Create the client, announce the connection, and disconnect on exit.

    Connectivity problems at startup are not fatal; tools report them
    individually once called.
    """
    global _client

    config, options = load_config()
    client = BuildableClient(config, options)
    try:
        await client.health_check()
        await client.connect()
    except APIError as e:
        logger.warning("Could not connect to Buildable API: %s", e)

    _client = client
    try:
        yield client
    finally:
        _client = None
        await client.disconnect()
        await client.aclose()


# Initialize FastMCP server
mcp = FastMCP(
    "buildable",
    instructions="""Buildable project management for AI coding assistants.

Start with get_project_context() to understand the project, then
get_next_task() to pick up work. Report work with start_task(),
update_progress() and complete_task(). Use create_discussion() when a
human decision is needed.""",
    lifespan=_lifespan,
)


def _require_client() -> BuildableClient:
    if _client is None:
        raise NotConnectedError()
    return _client


def _to_text(result: Any) -> str:
    return json.dumps(result, indent=2)


# ============================================
# Project Tools
# ============================================


@mcp.tool()
async def get_project_context() -> str:
    """
    Get complete project context.

    Returns:
        Project metadata, plan, task counts and summaries, and recent activity
    """
    client = _require_client()
    return _to_text(await client.get_project_context())


@mcp.tool()
async def get_next_task() -> str:
    """
    Get the next recommended task to work on.

    Returns:
        The task with its context, or a message when no task is available
    """
    client = _require_client()
    return _to_text(await client.get_next_task())


# ============================================
# Task Tools
# ============================================


@mcp.tool()
async def start_task(
    task_id: Annotated[str, Field(description="The ID of the task to start")],
    approach: Annotated[
        str | None, Field(description="Optional approach or strategy for the task")
    ] = None,
    estimated_duration: Annotated[
        float | None, Field(description="Estimated duration in minutes")
    ] = None,
    notes: Annotated[
        str | None, Field(description="Optional notes about the task")
    ] = None,
) -> str:
    """
    Start working on a task.

    Marks the assistant as working on this task.
    """
    client = _require_client()
    result = await client.start_task(
        task_id,
        approach=approach,
        estimated_duration=estimated_duration,
        notes=notes,
    )
    return _to_text(result)


@mcp.tool()
async def update_progress(
    task_id: Annotated[str, Field(description="The ID of the task being updated")],
    progress: Annotated[
        float, Field(ge=0, le=100, description="Progress percentage (0-100)")
    ],
    status_update: Annotated[str, Field(description="Brief status update message")],
    completed_steps: Annotated[
        list[str] | None, Field(description="List of completed steps")
    ] = None,
    current_step: Annotated[
        str | None, Field(description="Current step being worked on")
    ] = None,
    challenges: Annotated[
        list[str] | None, Field(description="Any challenges or blockers encountered")
    ] = None,
    files_modified: Annotated[
        list[str] | None, Field(description="List of files that were modified")
    ] = None,
    time_spent: Annotated[
        float | None, Field(description="Time spent in minutes")
    ] = None,
    notes: Annotated[str | None, Field(description="Additional notes")] = None,
) -> str:
    """
    Update progress on the current task.

    Challenges are reported to Buildable as blockers.
    """
    client = _require_client()
    update = ProgressUpdate(
        progress=progress,
        status_update=status_update,
        completed_steps=completed_steps,
        current_step=current_step,
        challenges=challenges,
        time_spent=time_spent,
        files_modified=files_modified,
        notes=notes,
    )
    return _to_text(await client.update_progress(task_id, update))


@mcp.tool()
async def complete_task(
    task_id: Annotated[str, Field(description="The ID of the task to complete")],
    completion_notes: Annotated[str, Field(description="Notes about task completion")],
    files_modified: Annotated[
        list[str] | None, Field(description="List of files that were modified")
    ] = None,
    testing_completed: Annotated[
        bool | None, Field(description="Whether testing was completed")
    ] = None,
    documentation_updated: Annotated[
        bool | None, Field(description="Whether documentation was updated")
    ] = None,
    time_spent: Annotated[
        float | None, Field(description="Total time spent in minutes")
    ] = None,
) -> str:
    """
    Mark a task as complete.

    The assistant returns to idle afterwards.
    """
    client = _require_client()
    completion = CompleteTaskRequest(
        completion_notes=completion_notes,
        files_modified=files_modified or [],
        testing_completed=testing_completed or False,
        documentation_updated=documentation_updated or False,
        time_spent=time_spent or 0,
    )
    return _to_text(await client.complete_task(task_id, completion))


# ============================================
# Discussion Tools
# ============================================


@mcp.tool()
async def create_discussion(
    title: Annotated[str, Field(description="Title of the discussion/question")],
    content: Annotated[
        str, Field(description="Detailed question or discussion content")
    ],
    urgency: Annotated[
        Urgency | None, Field(description="Urgency level of the question")
    ] = None,
    tags: Annotated[
        list[str] | None, Field(description="Tags to categorize the discussion")
    ] = None,
) -> str:
    """
    Ask a human a question about the project.

    Urgency defaults to medium. Tags are accepted but not sent.
    """
    client = _require_client()
    request = CreateDiscussionRequest(
        topic=title,
        message=content,
        context=DiscussionContext(urgency=urgency),
    )
    return _to_text(await client.create_discussion(request))


@mcp.tool()
async def health_check() -> str:
    """Check connectivity with the Buildable API."""
    client = _require_client()
    return _to_text(await client.health_check())


def main() -> None:
    """Entry point for the Buildable MCP server."""
    # stdout carries the JSON-RPC stream; force replaces the handler FastMCP installs
    logging.basicConfig(
        stream=sys.stderr, level=logging.INFO, format=LOG_FORMAT, force=True
    )

    try:
        config, options = load_config()
    except ConfigurationError as e:
        logger.error("Fatal error starting Buildable MCP server: %s", e)
        sys.exit(1)

    logging.getLogger().setLevel(options.log_level.upper())
    logger.info(
        "Starting Buildable MCP server, api: %s, project: %s",
        config.api_url,
        config.project_id,
    )
    mcp.run()


if __name__ == "__main__":
    main()
