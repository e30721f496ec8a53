import uuid

def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"

"""
ID generation utilities & it provides:
- Request IDs for log correlation

The main purpose:
Tie together the log lines of one guidance request.
"""
