import pytest
from fastapi.testclient import TestClient

from api import create_app
from config import Settings
from conftest import FakeModelClient, json_response, prompt_text
from errors import TransportError
from flow_runner import FlowRunner
from llm_client import ModelResponse
from store import InMemoryDocumentStore

JOB = {
    "title": "Backend Engineer",
    "department": "Engineering",
    "location": "Remote",
    "status": "Open",
    "description": "Build payment APIs in Go.",
    "skills_required": ["Go", "SQL"],
    "hiring_manager": "Sam Lee",
}


@pytest.fixture
def fake():
    return FakeModelClient()


@pytest.fixture
def client(fake):
    app = create_app(
        Settings(gemini_api_key=None),
        runner=FlowRunner(fake, default_model="test-model"),
        store=InMemoryDocumentStore(),
    )
    with TestClient(app) as test_client:
        yield test_client


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "running", "flows": 13}


def test_list_flows(client):
    flows = {f["name"]: f["input_schema"] for f in client.get("/flows").json()}
    assert "extract_skills_from_resume" in flows
    assert "resume_data_uri" in flows["extract_skills_from_resume"]["properties"]


def test_unknown_flow_is_404(client, fake):
    response = client.post("/flows/does_not_exist", json={})
    assert response.status_code == 404
    assert fake.calls == []


def test_run_flow(client, fake, resume_uri):
    fake.queue(json_response({"skills": ["Go", "SQL"]}))

    response = client.post("/flows/extract_skills_from_resume", json={"resume_data_uri": resume_uri})

    assert response.status_code == 200
    assert response.json() == {"skills": ["Go", "SQL"]}


def test_invalid_flow_input_is_422(client, fake):
    response = client.post("/flows/extract_skills_from_resume", json={"resume_data_uri": "resume.pdf"})

    assert response.status_code == 422
    body = response.json()
    assert "extract_skills_from_resume" in body["detail"]
    assert body["errors"]
    assert fake.calls == []


def test_no_output_is_502(client, fake):
    fake.queue(ModelResponse(text="I could not read that."))
    response = client.post("/flows/analyze_candidate_sentiment", json={"email_communications": "Thanks!"})
    assert response.status_code == 502


def test_transport_error_is_503(client, fake):
    fake.queue(TransportError("quota exceeded"))
    response = client.post("/flows/analyze_candidate_sentiment", json={"email_communications": "Thanks!"})
    assert response.status_code == 503
    assert "quota exceeded" in response.json()["detail"]


def test_job_requisition_crud(client):
    created = client.post("/job-requisitions", json=JOB)
    assert created.status_code == 201
    job = created.json()
    assert job["id"]
    assert job["date_posted"]

    assert client.get(f"/job-requisitions/{job['id']}").json()["title"] == "Backend Engineer"

    updated = client.put(f"/job-requisitions/{job['id']}", json={"status": "On Hold"})
    assert updated.status_code == 200
    assert updated.json()["status"] == "On Hold"
    assert updated.json()["hiring_manager"] == "Sam Lee"

    assert [j["id"] for j in client.get("/job-requisitions").json()] == [job["id"]]

    assert client.delete(f"/job-requisitions/{job['id']}").status_code == 200
    assert client.get(f"/job-requisitions/{job['id']}").status_code == 404


def test_invalid_job_requisition_is_422(client):
    response = client.post("/job-requisitions", json=dict(JOB, status="Maybe"))
    assert response.status_code == 422


def test_candidate_defaults_to_sourced(client):
    response = client.post(
        "/candidates",
        json={"name": "Jane Doe", "email": "jane@example.com", "job_title": "Backend Engineer"},
    )
    assert response.status_code == 201
    assert response.json()["stage"] == "Sourced"


def test_candidate_stage_must_be_known(client):
    created = client.post(
        "/candidates",
        json={"name": "Jane Doe", "email": "jane@example.com", "job_title": "Backend Engineer"},
    ).json()

    response = client.put(f"/candidates/{created['id']}", json={"stage": "Ghosted"})

    assert response.status_code == 422
    assert client.get(f"/candidates/{created['id']}").json()["stage"] == "Sourced"


def test_match_jobs_without_open_jobs(client, fake, resume_uri):
    client.post("/job-requisitions", json=dict(JOB, status="Closed"))

    response = client.post("/candidates/match-jobs", json={"resume_data_uri": resume_uri})

    assert response.status_code == 200
    assert response.json() == {"matches": []}
    assert fake.calls == []


def test_match_jobs_uses_only_open_jobs(client, fake, resume_uri):
    open_job = client.post("/job-requisitions", json=JOB).json()
    client.post("/job-requisitions", json=dict(JOB, title="Archived Role", status="Closed"))
    fake.queue(
        json_response(
            {
                "matches": [
                    {
                        "job_id": open_job["id"],
                        "job_title": "Backend Engineer",
                        "match_score": 91,
                        "match_reasoning": "Go and SQL",
                    }
                ]
            }
        )
    )

    response = client.post("/candidates/match-jobs", json={"resume_data_uri": resume_uri})

    assert response.status_code == 200
    assert [m["job_id"] for m in response.json()["matches"]] == [open_job["id"]]
    text = prompt_text(fake.calls[0])
    assert f"Job ID: {open_job['id']}" in text
    assert "Archived Role" not in text
