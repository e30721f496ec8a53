from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from typing import List, Literal, Union, get_args

LikelyState = Literal["Regulated", "Activated", "Overwhelmed", "Shutdown", "Escalating"]
LIKELY_STATES = list(get_args(LikelyState))

STEP_FIELDS = ["stepNumber", "title", "parentDo", "parentSay", "successCheck", "ifNotWorking", "timeBox"]


class GuidanceStep(BaseModel):
    # strict: a step with "3" for stepNumber or 42 for title is not a step
    model_config = ConfigDict(extra="forbid")

    stepNumber: int = Field(..., strict=True, ge=1, le=6)
    title: str = Field(..., strict=True, min_length=1)
    parentDo: str = Field(..., strict=True, min_length=1, description="What the parent does")
    parentSay: str = Field(..., strict=True, min_length=1, description="Suggested words to say")
    successCheck: str = Field(..., strict=True, min_length=1)
    ifNotWorking: str = Field(..., strict=True, min_length=1)
    timeBox: str = Field(..., strict=True, min_length=1)


class GuidancePlan(BaseModel):
    planTitle: str
    likelyState: LikelyState
    oneLineSummary: str
    safetyNote: str
    steps: List[GuidanceStep] = Field(..., min_length=6, max_length=6)
    optionalAddOns: List[str] = []


class ModelOutputStep(GuidanceStep):
    # any JSON number; the position decides the final stepNumber
    stepNumber: Union[StrictInt, StrictFloat]


class StepsOnly(BaseModel):
    steps: List[ModelOutputStep] = Field(..., min_length=6, max_length=6)


class StepRefreshOutput(BaseModel):
    step: ModelOutputStep


# JSON schemas sent to the Responses API (strict mode: every property
# required, no additional properties).

STEP_JSON_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "stepNumber": {"type": "integer", "minimum": 1, "maximum": 6},
        "title": {"type": "string"},
        "parentDo": {"type": "string"},
        "parentSay": {"type": "string"},
        "successCheck": {"type": "string"},
        "ifNotWorking": {"type": "string"},
        "timeBox": {"type": "string"},
    },
    "required": list(STEP_FIELDS),
}

PLAN_JSON_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "planTitle": {"type": "string"},
        "likelyState": {"type": "string", "enum": list(LIKELY_STATES)},
        "oneLineSummary": {"type": "string"},
        "safetyNote": {"type": "string"},
        "steps": {
            "type": "array",
            "minItems": 6,
            "maxItems": 6,
            "items": STEP_JSON_SCHEMA,
        },
        "optionalAddOns": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["planTitle", "likelyState", "oneLineSummary", "safetyNote", "steps", "optionalAddOns"],
}

STEP_REFRESH_JSON_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {"step": STEP_JSON_SCHEMA},
    "required": ["step"],
}

PLAN_SCHEMA_NAME = "calm_loop_guidance"
STEP_REFRESH_SCHEMA_NAME = "calm_loop_step_refresh"
