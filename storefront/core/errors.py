from dataclasses import dataclass, field
from typing import Any

from fastapi import HTTPException


@dataclass
class ApiError:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def as_detail(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class AppHTTPException(HTTPException):
    """HTTPException carrying a structured ``{code, message, details}`` detail."""

    def __init__(self, status_code: int, error: ApiError) -> None:
        super().__init__(status_code=status_code, detail=error.as_detail())
        self.error = error


def api_error(status_code: int, code: str, message: str, **details: Any) -> AppHTTPException:
    return AppHTTPException(status_code=status_code, error=ApiError(code=code, message=message, details=details))


def not_found(message: str, **details: Any) -> AppHTTPException:
    return api_error(404, "not_found", message, **details)
