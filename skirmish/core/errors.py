"""
Error classes for clearer exception sources.
"""
from __future__ import annotations
from typing import Any, Optional

class SkirmishError(Exception):
    pass

class DataLoadError(SkirmishError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to load {path}: {detail}")
        self.path = path
        self.detail = detail

class ConfigurationError(SkirmishError):
    """Static data the engine needs is missing or inconsistent. Fatal for a battle."""

class InvalidActionError(SkirmishError):
    def __init__(self, detail: str, *, side: Optional[str] = None, action: Any = None):
        super().__init__(detail)
        self.detail = detail
        self.side = side
        self.action = action

class InvalidMoveError(InvalidActionError):
    def __init__(self, detail: str, *, side: Optional[str] = None, action: Any = None, move_id: Optional[int] = None):
        super().__init__(detail, side=side, action=action)
        self.move_id = move_id

class InvalidTargetError(SkirmishError):
    pass
