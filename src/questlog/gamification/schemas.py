"""Pydantic response models for gamification endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class LevelEntry(BaseModel):
    level: int
    title: str
    cumulative: int


class AllLevelsResponse(BaseModel):
    levels: list[LevelEntry]
