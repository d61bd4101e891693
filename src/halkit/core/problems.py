"""Structured, user-facing failure values (``application/problem+json``)."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from pydantic import BaseModel, Field, model_validator

DEFAULT_PROBLEM_TYPE = "http://www.w3.org/Protocols/rfc2616/rfc2616-sec10.html"


class ApiProblem(BaseModel):
    """
    A problem detail returned to the caller instead of a document.

    ``title`` defaults to the reason phrase of ``status``.
    """

    status: int
    detail: str
    title: str | None = None
    type: str = DEFAULT_PROBLEM_TYPE
    additional: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def default_title(self) -> ApiProblem:
        if self.title is None:
            try:
                self.title = HTTPStatus(self.status).phrase
            except ValueError:
                self.title = "Unknown"
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return the problem payload."""
        payload: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
        }
        payload.update(self.additional)
        return payload


class PaginationProblem(ApiProblem):
    """The requested page is outside ``1..page_count``."""

    status: int = 409
    detail: str = "Invalid page provided"
    page: int
    page_count: int

    @property
    def valid_range(self) -> tuple[int, int]:
        return (1, self.page_count)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["page"] = self.page
        payload["page_count"] = self.page_count
        return payload
