from typing import Any, Dict

from app.llm.schemas import GuidanceStep


def splice_step(plan: Dict[str, Any], step_number: int, step: GuidanceStep) -> Dict[str, Any]:
    """
    Return a copy of `plan` with steps[step_number - 1] replaced by `step`.
    The new step always gets `step_number`, whatever the model put there.
    Every other field and step is carried over untouched.
    """
    idx = step_number - 1
    fixed = {**step.model_dump(), "stepNumber": step_number}
    return {
        **plan,
        "steps": [fixed if i == idx else s for i, s in enumerate(plan["steps"])],
    }
