"""
API request schemas.
What it defines:
- ScenarioInput: the normalized description of one situation
- Field aliases matching the JSON body the page sends

And, the main purpose:
Give the rest of the service one typed view of an untrusted request body.
"""


from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScenarioInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mood_owner: str = Field("Parent", alias="moodOwner")
    parent_moods: List[str] = Field(default_factory=list, alias="parentMoods")
    trigger: str
    goal: str

    environment_type: str = Field("Home", alias="environmentType")
    intensity: int = Field(5, ge=1, le=10)
    time_limit_none: bool = Field(False, alias="timeLimitNone")
    time_limit_min: Optional[int] = Field(10, ge=0, le=60, alias="timeLimitMin", description="None when there is no time limit")
    child_age: int = Field(7, ge=1, le=18, alias="childAge")
    constraints_notes: str = Field("", alias="constraintsNotes")
    child_behaviors: List[str] = Field(default_factory=list, alias="childBehaviors")

    second_child_enabled: bool = Field(False, alias="secondChildEnabled")
    second_child_age: int = Field(5, ge=1, le=18, alias="secondChildAge")
    second_child_intensity: int = Field(5, ge=1, le=10, alias="secondChildIntensity")
    second_child_behaviors: List[str] = Field(default_factory=list, alias="secondChildBehaviors")

    tried_already: List[str] = Field(default_factory=list, alias="triedAlready")
