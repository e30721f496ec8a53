"""
Error taxonomy for the guidance service.
What it defines:
- ConfigError: server is missing its credential
- ValidationError: request rejected before any model call
- UpstreamError: OpenAI answered with a non-success status (or was unreachable)
- ShapeError: OpenAI answered, but the output broke the plan contract

And, the main purpose:
Every failure carries its HTTP status and a JSON-ready body with an "error" key.
"""


from typing import Any, Dict, List, Optional

MAX_EXCERPT = 4000


def excerpt(text: Optional[str], n: int = MAX_EXCERPT) -> str:
    return (text or "")[:n]


class GuidanceError(RuntimeError):
    status_code: int = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    @property
    def body(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class ConfigError(GuidanceError):
    status_code = 500


class ValidationError(GuidanceError):
    status_code = 400

    def __init__(self, message: str, *, fields: Optional[List[str]] = None):
        if fields:
            super().__init__(message, fields=fields)
        else:
            super().__init__(message)
        self.fields = fields or []


class UpstreamError(GuidanceError):
    def __init__(self, message: str, *, status_code: int, details: str):
        super().__init__(message, status_code=status_code, status=status_code, details=excerpt(details))


class ShapeError(GuidanceError):
    status_code = 502

    def __init__(self, message: str, *, raw: Optional[str] = None, debug: Optional[str] = None, limit: int = MAX_EXCERPT):
        extra: Dict[str, Any] = {}
        if debug is not None:
            extra["debug"] = excerpt(debug, limit)
        if raw is not None:
            extra["raw"] = excerpt(raw, limit)
        super().__init__(message, **extra)
