"""
Cleans up the scenario fields of an incoming request.
What it does:
- Clamps every number into its valid range (bad/missing -> default)
- Turns list-ish fields (list or "a, b, c") into trimmed, de-duplicated lists
- Trims free text
- Rejects the request only when trigger or goal is missing/too short

And, the main purpose:
Never let an untrusted body reach the prompt un-normalized.
"""


import math
from typing import Any, Dict, List, Optional

from app.api.types import ScenarioInput
from app.core.errors import ValidationError

MIN_TEXT_LEN = 3

DEFAULT_INTENSITY = 5
DEFAULT_TIME_LIMIT_MIN = 10
DEFAULT_CHILD_AGE = 7
DEFAULT_SECOND_CHILD_AGE = 5
DEFAULT_SECOND_CHILD_INTENSITY = 5
DEFAULT_ENVIRONMENT = "Home"


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        n = float(value)
    elif isinstance(value, str):
        try:
            n = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(n) or math.isinf(n):
        return None
    return n


def clamp_int(value: Any, default: int, lo: int, hi: int) -> int:
    n = _to_number(value)
    if n is None:
        n = default
    return max(lo, min(hi, int(round(n))))


def clean_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def string_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        items = [clean_text(x) for x in value]
    elif isinstance(value, str):
        items = [s.strip() for s in value.split(",")]
    else:
        return []
    # dict.fromkeys keeps first-seen order
    return list(dict.fromkeys(x for x in items if x))


def _no_time_limit(body: Dict[str, Any]) -> bool:
    if bool(body.get("timeLimitNone")):
        return True
    raw = body.get("timeLimitMin")
    return isinstance(raw, str) and raw.strip().lower() == "none"


def normalize_scenario(body: Dict[str, Any]) -> ScenarioInput:
    trigger = clean_text(body.get("trigger"))
    goal = clean_text(body.get("goal"))

    missing = [
        name for name, text in (("trigger", trigger), ("goal", goal))
        if len(text) < MIN_TEXT_LEN
    ]
    if missing:
        raise ValidationError(
            f"Missing required fields: {' and '.join(missing)}.",
            fields=missing,
        )

    time_limit_none = _no_time_limit(body)

    return ScenarioInput(
        mood_owner="Parent",  # selector is locked to the adult
        parent_moods=string_list(body.get("parentMoods")),
        trigger=trigger,
        goal=goal,
        environment_type=clean_text(body.get("environmentType")) or DEFAULT_ENVIRONMENT,
        intensity=clamp_int(body.get("intensity"), DEFAULT_INTENSITY, 1, 10),
        time_limit_none=time_limit_none,
        time_limit_min=None if time_limit_none else clamp_int(body.get("timeLimitMin"), DEFAULT_TIME_LIMIT_MIN, 0, 60),
        child_age=clamp_int(body.get("childAge"), DEFAULT_CHILD_AGE, 1, 18),
        constraints_notes=clean_text(body.get("constraintsNotes")),
        child_behaviors=string_list(body.get("childBehaviors")),
        second_child_enabled=bool(body.get("secondChildEnabled")),
        second_child_age=clamp_int(body.get("secondChildAge"), DEFAULT_SECOND_CHILD_AGE, 1, 18),
        second_child_intensity=clamp_int(body.get("secondChildIntensity"), DEFAULT_SECOND_CHILD_INTENSITY, 1, 10),
        second_child_behaviors=string_list(body.get("secondChildBehaviors")),
        tried_already=string_list(body.get("triedAlready")),
    )
