"""Exceptions raised by gate declaration and enforcement."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse


class GateSpecError(ValueError):
    """A gate was declared with zero or several modes, or without a target."""


@dataclass(eq=False)
class FeatureGateError(Exception):
    """A closed gate surfaced to API callers as a 403."""

    code: str
    message: str
    detail: Mapping[str, Any] = field(default_factory=dict)
    status_code: int = status.HTTP_403_FORBIDDEN

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def payload(self) -> Dict[str, Any]:
        """Body shared by the HTTP exception and the JSON response."""

        return {"error": self.code, "message": self.message, **self.detail}

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.payload)

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.payload)
