"""FastAPI application exposing the prompt library."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, field_validator

from .cache import PromptCache
from .config import AppConfig, load_config
from .file_operations import PromptFileOperations, PromptNotFoundError
from .frontmatter import parse_front_matter
from .logging_utils import JsonlRequestLogger, configure_logging
from .metrics import compute_metrics
from .rendering import render_arguments
from .sync import GitHubSync
from .types import PromptRecord

CONFIG: AppConfig = load_config()
configure_logging(CONFIG.log_level)
logger = logging.getLogger(__name__)


class PromptSummary(BaseModel):
    name: str
    title: str
    description: str


class PromptListResponse(BaseModel):
    prompts: list[PromptSummary]


class TextContent(BaseModel):
    type: str = "text"
    text: str


class PromptMessage(BaseModel):
    role: str = "user"
    content: TextContent


class GetPromptResponse(BaseModel):
    name: str
    description: str | None = None
    messages: list[PromptMessage]


class GetPromptRequest(BaseModel):
    arguments: dict[str, str] = Field(default_factory=dict, description="Values substituted into the prompt body")

    @field_validator("arguments", mode="before")
    @classmethod
    def _coerce_arguments(cls, value: Any) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("arguments must be an object")
        return {str(key): "" if item is None else str(item) for key, item in value.items()}


def _summarize(record: PromptRecord) -> PromptSummary:
    attributes = record.attributes
    return PromptSummary(
        name=record.name,
        title=str(attributes.get("title") or record.name),
        description=str(attributes.get("description") or record.preview),
    )


def _build_file_operations(config: AppConfig) -> PromptFileOperations:
    cache = PromptCache(config.prompts_dir)
    return PromptFileOperations(config.prompts_dir, cache, watch=config.watch_enabled)


_file_ops = _build_file_operations(CONFIG)
_request_logger = JsonlRequestLogger(CONFIG.log_path)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await GitHubSync(CONFIG.prompts_dir, CONFIG.github_repo_url, CONFIG.github_repo_ref).sync()
    await _file_ops.ensure_ready()
    logger.info("Serving prompts from %s", CONFIG.prompts_dir)
    try:
        yield
    finally:
        await _file_ops.close()


app = FastAPI(title="Prompt Library", lifespan=lifespan)


async def _get_prompt(name: str, arguments: dict[str, str]) -> GetPromptResponse:
    try:
        content = await _file_ops.read_prompt(name)
    except PromptNotFoundError as exc:
        _request_logger.log(name, found=False, argument_keys=arguments.keys())
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    _request_logger.log(name, found=True, argument_keys=arguments.keys())
    parsed = parse_front_matter(content)
    info = _file_ops.get_prompt_info(name)
    description = info.attributes.get("description") if info else None
    message = PromptMessage(content=TextContent(text=render_arguments(parsed.body, arguments)))
    return GetPromptResponse(
        name=name,
        description=None if description is None else str(description),
        messages=[message],
    )


@app.get("/prompts", response_model=PromptListResponse)
async def list_prompts() -> PromptListResponse:
    records = await _file_ops.list_prompts()
    return PromptListResponse(prompts=[_summarize(record) for record in records])


@app.get("/prompts/{name:path}/raw", response_class=PlainTextResponse)
async def raw_prompt(name: str) -> PlainTextResponse:
    try:
        content = await _file_ops.read_prompt(name)
    except PromptNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return PlainTextResponse(content, media_type="text/markdown; charset=utf-8")


@app.get("/prompts/{name:path}", response_model=GetPromptResponse)
async def get_prompt(name: str) -> GetPromptResponse:
    return await _get_prompt(name, {})


@app.post("/prompts/{name:path}", response_model=GetPromptResponse)
async def render_prompt(name: str, request: GetPromptRequest) -> GetPromptResponse:
    return await _get_prompt(name, request.arguments)


@app.get("/metrics")
async def metrics() -> dict[str, object]:
    usage = compute_metrics(CONFIG.log_path)
    return {
        "prompt_count": _file_ops.cache.size(),
        "watcher_attached": _file_ops.watcher.is_attached,
        **usage,
    }


__all__ = ["app"]
