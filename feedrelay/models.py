"""Pydantic data models shared by the renderer and the CLI."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class RenderState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RENDERED = "rendered"
    ERROR = "error"


class Article(BaseModel):
    """One feed item, derived fresh on every render."""

    model_config = ConfigDict(frozen=True)

    title: str
    link: str
    pub_date: str = ""
    date: str = ""
    description: str = ""
    excerpt: str = ""
    creator: str = ""
