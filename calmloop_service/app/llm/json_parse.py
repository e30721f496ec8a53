import json
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Type, Union


@dataclass(frozen=True)
class AggregatedTextEnvelope:
    """{"output_text": "..."}"""

    output_text: str

    @classmethod
    def match(cls, resp: Any) -> Optional["AggregatedTextEnvelope"]:
        if not isinstance(resp, dict):
            return None
        text = resp.get("output_text")
        if isinstance(text, str) and text.strip():
            return cls(text)
        return None

    def text(self) -> str:
        return self.output_text


@dataclass(frozen=True)
class OutputItemsEnvelope:
    """{"output": [{"content": [{"text": "..."}, ...]}, ...]}"""

    fragments: Tuple[str, ...]

    @classmethod
    def match(cls, resp: Any) -> Optional["OutputItemsEnvelope"]:
        if not isinstance(resp, dict):
            return None
        output = resp.get("output")
        if not isinstance(output, list):
            return None

        parts: List[str] = []
        for item in output:
            if not isinstance(item, dict) or not isinstance(item.get("content"), list):
                continue
            for c in item["content"]:
                if not isinstance(c, dict):
                    continue
                text = c.get("text")
                if isinstance(text, str) and text:
                    parts.append(text)

        if not "".join(parts).strip():
            return None
        return cls(tuple(parts))

    def text(self) -> str:
        return "".join(self.fragments).strip()


Envelope = Union[AggregatedTextEnvelope, OutputItemsEnvelope]

# priority order
ENVELOPE_SHAPES: Tuple[Type, ...] = (AggregatedTextEnvelope, OutputItemsEnvelope)


def match_envelope(resp: Any) -> Optional[Envelope]:
    for shape in ENVELOPE_SHAPES:
        env = shape.match(resp)
        if env is not None:
            return env
    return None


def extract_model_text(resp: Any) -> Optional[str]:
    """
    Pull the model's generated text out of a Responses API envelope.
    Returns None when neither known shape carries any text.
    """
    env = match_envelope(resp)
    return env.text() if env is not None else None


def loads_with_brace_retry(text: str) -> Any:
    """
    json.loads, and if that fails, wrap non-brace-prefixed text in {...}
    and try once more. Raises json.JSONDecodeError when both fail.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        trimmed = (text or "").strip()
        candidate = trimmed if trimmed.startswith("{") else "{" + trimmed + "}"
        return json.loads(candidate)
