"""
Tests for the HTTP API

Tests cover:
- Tool catalog and health routes
- Evaluate / convert / history
- Routine and template flows, discarding a routine
- Error mapping: unknown ids -> 404, disallowed transitions -> 409,
  unconfigured app -> 503
"""

import pytest
from fastapi.testclient import TestClient

from convertext import ConverText
from convertext.server import app as server_app
from convertext.server.app import api, set_app
from convertext.storage import MemoryStorage


@pytest.fixture
def client():
    set_app(ConverText(storage=MemoryStorage()))
    with TestClient(api) as test_client:
        yield test_client
    set_app(None)


def _new_routine(client, owner_id="default"):
    response = client.post("/api/routines", json={"owner_id": owner_id})
    assert response.status_code == 200
    return response.json()


def _run_step(client, routine_id, text, task):
    response = client.post(
        f"/api/routines/{routine_id}/steps",
        json={"text": text, "task_description": task, "run": True},
    )
    assert response.status_code == 200
    return response.json()


class TestCatalogRoutes:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_tool_signatures(self, client):
        signatures = client.get("/api/tool-signatures").json()
        assert signatures["searchAndReplace"] == ["text", "search", "replace"]

    def test_tools(self, client):
        tools = {t["name"]: t for t in client.get("/api/tools").json()}
        assert tools["csvToJson"]["render_mode"] == "output"
        assert tools["toUppercase"]["render_mode"] == "diff"


class TestConvertRoutes:

    def test_evaluate(self, client):
        response = client.post(
            "/api/evaluate",
            json={"text": "a,b\n1,2", "task_description": "csv to json"},
        )
        assert response.status_code == 200
        assert response.json()["tool"] == "csvToJson"

    def test_convert_and_history(self, client):
        response = client.post(
            "/api/convert",
            json={
                "text": "the quick brown fox",
                "task_description": "Capitalize all words",
                "owner_id": "alice",
            },
        )
        body = response.json()
        assert body["converted_text"] == "The Quick Brown Fox"
        assert body["confidence"] == 1
        assert "error" not in body

        history = client.get("/api/history", params={"owner_id": "alice"}).json()
        assert len(history) == 1
        assert history[0]["result"]["tool_used"] == "capitalize"

    def test_convert_with_tool_args(self, client):
        response = client.post(
            "/api/convert",
            json={"text": "ab", "task_description": "repeat it", "tool_args": ["2"]},
        )
        assert response.json()["converted_text"] == "ab\nab"

    def test_convert_requires_task(self, client):
        response = client.post("/api/convert", json={"text": "ab"})
        assert response.status_code == 422


class TestRoutineRoutes:

    def test_step_flow(self, client):
        routine = _new_routine(client)
        routine = _run_step(client, routine["id"], "hello", "uppercase")
        first = routine["steps"][0]
        assert first["status"] == "completed"
        assert routine["status"] == "completed"

        routine = client.post(
            f"/api/routines/{routine['id']}/steps/{first['id']}/carry-forward"
        ).json()
        editing = routine["steps"][1]
        assert editing["status"] == "editing"
        assert editing["input"]["text"] == "HELLO"

        routine = client.post(
            f"/api/routines/{routine['id']}/steps/{editing['id']}/submit",
            json={"task_description": "lowercase"},
        ).json()
        assert routine["steps"][1]["output"]["result"]["converted_text"] == "hello"

        fetched = client.get(f"/api/routines/{routine['id']}").json()
        assert len(fetched["steps"]) == 2

    def test_pending_step_run_and_skip(self, client):
        routine = _new_routine(client)
        routine = client.post(
            f"/api/routines/{routine['id']}/steps",
            json={"text": "ab", "task_description": "repeat"},
        ).json()
        routine = client.post(
            f"/api/routines/{routine['id']}/steps",
            json={"text": "x", "task_description": "uppercase"},
        ).json()
        first, second = routine["steps"]
        assert first["status"] == "pending"

        routine = client.post(
            f"/api/routines/{routine['id']}/steps/{first['id']}/run",
            json={"tool_args": ["3"]},
        ).json()
        assert routine["steps"][0]["output"]["result"]["converted_text"] == "ab\nab\nab"

        routine = client.post(f"/api/routines/{routine['id']}/steps/{second['id']}/skip").json()
        assert routine["steps"][1]["status"] == "skipped"

    def test_unknown_routine_404(self, client):
        assert client.get("/api/routines/routine_missing").status_code == 404

    def test_discard_routine(self, client):
        routine = _new_routine(client)
        _run_step(client, routine["id"], "hello", "uppercase")

        response = client.delete(f"/api/routines/{routine['id']}")
        assert response.status_code == 200
        assert response.json() == {"discarded": True}
        assert client.get(f"/api/routines/{routine['id']}").status_code == 404
        assert client.delete(f"/api/routines/{routine['id']}").status_code == 404

    def test_unknown_step_404(self, client):
        routine = _new_routine(client)
        response = client.post(f"/api/routines/{routine['id']}/steps/step_missing/skip")
        assert response.status_code == 404

    def test_rerun_completed_step_409(self, client):
        routine = _new_routine(client)
        routine = _run_step(client, routine["id"], "hello", "uppercase")
        step_id = routine["steps"][0]["id"]

        response = client.post(f"/api/routines/{routine['id']}/steps/{step_id}/run")
        assert response.status_code == 409


class TestTemplateRoutes:

    def test_save_replay_delete(self, client):
        routine = _new_routine(client)
        routine = _run_step(client, routine["id"], " a ", "trim whitespace")

        template = client.post(
            "/api/templates",
            json={"execution_id": routine["id"], "name": "Trim"},
        ).json()
        assert template["steps"][0]["task_description"] == "trim whitespace"

        replayed = client.post(f"/api/templates/{template['id']}/replay").json()
        assert replayed["saved_routine_id"] == template["id"]
        assert replayed["steps"][0]["status"] == "pending"

        listed = client.get("/api/templates").json()
        assert listed[0]["usage_count"] == 1

        assert client.delete(f"/api/templates/{template['id']}").status_code == 200
        assert client.delete(f"/api/templates/{template['id']}").status_code == 404

    def test_replay_unknown_404(self, client):
        assert client.post("/api/templates/template_missing/replay").status_code == 404


class TestUnconfigured:

    def test_503_when_config_fails(self, monkeypatch):
        set_app(None)
        monkeypatch.setattr(server_app, "_try_load_app", lambda: None)

        response = TestClient(api).get("/api/tools")

        assert response.status_code == 503
