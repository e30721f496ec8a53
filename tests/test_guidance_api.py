import json

import pytest

from conftest import FakeUpstream, make_plan, make_step, output_items_envelope, output_text_envelope


@pytest.mark.parametrize("wrap", [output_text_envelope, output_items_envelope])
def test_full_plan_passes_through(client_for, scenario_body, wrap):
    plan = make_plan()
    up = FakeUpstream(body=wrap(plan))
    r = client_for(up).post("/api/guidance", json=scenario_body)
    assert r.status_code == 200
    assert r.json() == plan

    payload = json.loads(up.sent["input"][1]["content"])
    assert payload["trigger"] == scenario_body["trigger"]
    assert payload["intensityLevel1to10"] == 5
    assert payload["childAge"] == 7


def test_missing_goal_is_400_without_upstream_call(client_for, upstream):
    r = client_for(upstream).post("/api/guidance", json={"trigger": "Candy standoff at lunch"})
    assert r.status_code == 400
    body = r.json()
    assert "goal" in body["error"]
    assert body["fields"] == ["goal"]
    assert upstream.requests == []


@pytest.mark.parametrize("raw", [b"{not json", b"", b"[1, 2]", b"null"])
def test_unparseable_body_is_400(client_for, upstream, raw):
    r = client_for(upstream).post("/api/guidance", content=raw, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid JSON body."}
    assert upstream.requests == []


def test_missing_key_is_500(client_for, upstream, scenario_body):
    r = client_for(upstream, key="").post("/api/guidance", json=scenario_body)
    assert r.status_code == 500
    assert r.json()["error"] == "Missing OPENAI_API_KEY on the server."
    assert upstream.requests == []


def test_refresh_corrects_step_number(client_for, scenario_body):
    plan = make_plan()
    replacement = make_step(1, title="Offer two lunch choices")
    up = FakeUpstream(body=output_items_envelope({"step": replacement}))

    body = dict(scenario_body, refreshStepNumber=4, currentGuidance=plan, notWorkingDetails="Still refusing")
    r = client_for(up).post("/api/guidance", json=body)
    assert r.status_code == 200
    out = r.json()
    assert out["steps"][3]["stepNumber"] == 4
    assert out["steps"][3]["title"] == "Offer two lunch choices"
    for j in (0, 1, 2, 4, 5):
        assert out["steps"][j] == plan["steps"][j]
    assert out["planTitle"] == plan["planTitle"]

    sent = up.sent
    assert sent["max_output_tokens"] == 450
    assert sent["text"]["format"]["name"] == "calm_loop_step_refresh"
    payload = json.loads(sent["input"][1]["content"])
    assert payload["stepToReplace"] == 4
    assert payload["whatDidntWork"] == "Still refusing"


def test_refresh_with_malformed_plan_falls_back_to_full_generation(client_for, scenario_body):
    plan = make_plan()
    up = FakeUpstream(body=output_text_envelope(plan))
    short = make_plan(steps=plan["steps"][:5])

    r = client_for(up).post("/api/guidance", json=dict(scenario_body, refreshStepNumber=3, currentGuidance=short))
    assert r.status_code == 200
    assert r.json() == plan
    assert up.sent["text"]["format"]["name"] == "calm_loop_guidance"


def test_feedback_request_asks_for_revised_plan(client_for, scenario_body):
    up = FakeUpstream()
    r = client_for(up).post("/api/guidance", json=dict(scenario_body, unresolvedDetails="Candy still demanded"))
    assert r.status_code == 200
    payload = json.loads(up.sent["input"][1]["content"])
    assert payload["unresolvedDetails"] == "Candy still demanded"
    assert "revised" in payload["instruction"]


def test_upstream_429_is_relayed(client_for, scenario_body):
    up = FakeUpstream(status_code=429, body={"error": {"message": "Rate limit reached"}})
    r = client_for(up).post("/api/guidance", json=scenario_body)
    assert r.status_code == 429
    body = r.json()
    assert body["error"] == "OpenAI API error"
    assert body["status"] == 429
    assert "Rate limit reached" in body["details"]


def test_non_json_envelope_is_502(client_for, scenario_body):
    up = FakeUpstream(body="<html>gateway</html>")
    r = client_for(up).post("/api/guidance", json=scenario_body)
    assert r.status_code == 502
    assert r.json()["debug"] == "<html>gateway</html>"


def test_envelope_without_text_is_502(client_for, scenario_body):
    up = FakeUpstream(body={"output": []})
    r = client_for(up).post("/api/guidance", json=scenario_body)
    assert r.status_code == 502
    assert "could not extract model text" in r.json()["error"]


def test_plan_with_five_steps_is_502(client_for, scenario_body):
    plan = make_plan()
    plan["steps"].pop()
    up = FakeUpstream(body=output_text_envelope(plan))
    r = client_for(up).post("/api/guidance", json=scenario_body)
    assert r.status_code == 502
    assert r.json()["error"] == "Parsed output missing steps[6]."


def test_refresh_output_without_step_is_502(client_for, scenario_body):
    up = FakeUpstream(body=output_text_envelope({"title": "not a step"}))
    body = dict(scenario_body, refreshStepNumber=2, currentGuidance=make_plan())
    r = client_for(up).post("/api/guidance", json=body)
    assert r.status_code == 502
    assert r.json()["error"] == "Step refresh output missing required step fields."


def test_unexpected_error_is_500(client_for, scenario_body, monkeypatch):
    import app.api.routes as routes

    async def broken(body, invoker):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(routes, "generate_guidance", broken)
    r = client_for(FakeUpstream()).post("/api/guidance", json=scenario_body)
    assert r.status_code == 500
    assert r.json() == {"error": "kaboom"}


@pytest.mark.parametrize("emitted", [0, 7, 4.0])
def test_refresh_overrides_any_emitted_step_number(client_for, scenario_body, emitted):
    plan = make_plan()
    up = FakeUpstream(body=output_text_envelope({"step": make_step(1, stepNumber=emitted, title="Name the feeling")}))

    body = dict(scenario_body, refreshStepNumber=4, currentGuidance=plan)
    r = client_for(up).post("/api/guidance", json=body)
    assert r.status_code == 200
    out = r.json()
    assert out["steps"][3]["stepNumber"] == 4
    assert out["steps"][3]["title"] == "Name the feeling"
    for j in (0, 1, 2, 4, 5):
        assert out["steps"][j] == plan["steps"][j]


def test_zero_based_plan_is_renumbered(client_for, scenario_body):
    plan = make_plan(steps=[make_step(i + 1, stepNumber=i) for i in range(6)])
    up = FakeUpstream(body=output_text_envelope(plan))
    r = client_for(up).post("/api/guidance", json=scenario_body)
    assert r.status_code == 200
    assert [s["stepNumber"] for s in r.json()["steps"]] == [1, 2, 3, 4, 5, 6]


@pytest.mark.parametrize(
    "raw",
    [b"{not json", json.dumps({"trigger": "x"}).encode(), json.dumps({"goal": "Calm lunch"}).encode()],
)
def test_missing_key_wins_over_bad_body(client_for, upstream, raw):
    r = client_for(upstream, key="").post("/api/guidance", content=raw, headers={"Content-Type": "application/json"})
    assert r.status_code == 500
    assert r.json()["error"] == "Missing OPENAI_API_KEY on the server."
    assert upstream.requests == []


def test_non_json_envelope_excerpt_is_bounded(client_for, scenario_body):
    up = FakeUpstream(body="<" * 5000)
    r = client_for(up).post("/api/guidance", json=scenario_body)
    assert r.status_code == 502
    assert len(r.json()["debug"]) == 4000
