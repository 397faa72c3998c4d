"""Route tests; services run against a fake completion client."""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeCompletionClient, make_settings
from thinkcheck.core.exceptions import UpstreamError
from thinkcheck.core.prompt_manager import PromptManager
from thinkcheck.dependencies import (
    get_answer_evaluator,
    get_completion_client,
    get_notes_service,
    get_quiz_service,
    get_roadmap_service,
)
from thinkcheck.main import app
from thinkcheck.services import AnswerEvaluator, NotesService, QuizService, RoadmapService


@pytest.fixture
def install_client():
    """Wire every service to the given fake client for the duration of a test."""

    def _install(client, settings=None):
        settings = settings or make_settings()
        prompts = PromptManager()
        app.dependency_overrides[get_completion_client] = lambda: client
        app.dependency_overrides[get_quiz_service] = lambda: QuizService(client, prompts, settings)
        app.dependency_overrides[get_answer_evaluator] = lambda: AnswerEvaluator(client, prompts, settings)
        app.dependency_overrides[get_notes_service] = lambda: NotesService(client, prompts)
        app.dependency_overrides[get_roadmap_service] = lambda: RoadmapService(client, prompts, settings)
        return TestClient(app)

    yield _install
    app.dependency_overrides.clear()


def test_health():
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert "llm_configured" in body
    assert response.headers["X-Request-ID"]


def test_request_id_echoed():
    response = TestClient(app).get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


def test_generate_mcq(install_client, mcq_reply):
    client = install_client(FakeCompletionClient([mcq_reply]))

    response = client.post("/generate-mcq", json={"topic": "JavaScript", "numQuestions": 2})

    assert response.status_code == 200
    questions = response.json()["questions"]
    assert [q["correctAnswer"] for q in questions] == ["b", "b"]
    assert questions[1]["codeSnippets"][0]["language"] == "javascript"


def test_missing_fields_are_400(install_client):
    client = install_client(FakeCompletionClient())

    response = client.post("/generate-mcq", json={"numQuestions": 2})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request data"
    assert "topic" in body["details"]


def test_generate_written(install_client):
    client = install_client(FakeCompletionClient(["1. Explain closures.\n2. Explain hoisting."]))

    response = client.post("/generate-written", json={"topic": "JavaScript", "numQuestions": 2})

    assert response.status_code == 200
    assert len(response.json()["questions"]) == 2


def test_evaluate_answers(install_client):
    reply = '{"score": 85, "comments": "Solid.", "suggestions": ["Mention scope chains."]}'
    client = install_client(FakeCompletionClient([reply]))

    response = client.post("/evaluate-answers", json={
        "questions": ["What is a closure?", "What is hoisting?"],
        "answers": ["A function with its scope.", ""],
    })

    assert response.status_code == 200
    body = response.json()
    assert [item["score"] for item in body["feedback"]] == [85, 0]
    assert body["overallScore"] == 43
    assert body["metrics"]["questionsEvaluated"] == 2


def test_evaluate_length_mismatch_is_400(install_client):
    client = install_client(FakeCompletionClient())

    response = client.post("/evaluate-answers", json={"questions": ["Q1", "Q2"], "answers": ["A1"]})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request data"


def test_missing_api_key_is_500(install_client):
    client = install_client(FakeCompletionClient(configured=False), make_settings(LLM_API_KEY=None))

    response = client.post("/notes", json={"subject": "Closures"})

    assert response.status_code == 500
    assert response.json()["error"] == "Missing LLM API key in environment variables"


def test_upstream_error_is_500(install_client):
    client = install_client(FakeCompletionClient([UpstreamError("Completion API returned status 503", status_code=503)]))

    response = client.post("/generate-roadmap", json={"topic": "Rust", "timeframe": "1 month"})

    assert response.status_code == 500
    assert "503" in response.json()["error"]


def test_notes(install_client):
    client = install_client(FakeCompletionClient(["# One\nFirst.\n# Two\nSecond."]))

    response = client.post("/notes", json={"subject": "Closures", "level": "beginner"})

    assert response.status_code == 200
    notes = response.json()["notes"]
    assert [s["title"] for s in notes["sections"]] == ["One", "Two"]


def test_suggest_paths(install_client):
    client = install_client(FakeCompletionClient(["Consider B.Tech."]))

    response = client.post("/suggest-paths", json={"responses": [{"question": "Favourite subject?", "answer": "Physics"}]})

    assert response.status_code == 200
    assert response.json() == {"rawSuggestions": "Consider B.Tech."}


def test_connection_test(install_client):
    client = install_client(FakeCompletionClient(["Hello!"]))

    response = client.get("/test-llm")

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["response"] == "Hello!"


def test_connection_test_failure(install_client):
    client = install_client(FakeCompletionClient([UpstreamError("refused")]))

    response = client.get("/test-llm")

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert response.json()["error"] == "refused"


def test_evaluate_accepts_generated_question_objects(install_client):
    fake = FakeCompletionClient(['{"score": 75, "comments": "Good."}'])
    client = install_client(fake)

    response = client.post("/evaluate-answers", json={
        "questions": [
            {"question": "Explain closures.", "category": "Fundamentals", "difficulty": "medium"},
            "Explain hoisting.",
        ],
        "answers": ["A function with its scope.", "Declarations move up."],
    })

    assert response.status_code == 200
    assert [item["score"] for item in response.json()["feedback"]] == [75, 75]
    assert 'Question: "Explain closures."' in fake.calls[0].prompt
