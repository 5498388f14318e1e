# tests/test_app.py
import json

import pytest

FLASHCARDS = {"flashcards": [
    {"front": "What does photosynthesis convert?", "back": "Light into chemical energy"},
    {"front": "Where does it happen?", "back": "Chloroplasts"},
]}

QUIZ = {"quiz": [{
    "question": "What does photosynthesis produce?",
    "options": ["Oxygen", "Nitrogen", "Helium", "Argon"],
    "correct": 0,
    "explanation": "Oxygen is released as a by-product.",
}]}


@pytest.mark.parametrize("route,field,message", [
    ("/api/flashcards", "notes", "Notes are required"),
    ("/api/quiz", "text", "Text is required to generate a quiz"),
    ("/api/study-buddy", "question", "Question is required"),
])
@pytest.mark.parametrize("value", ["", "   ", "\n\t", None])
def test_empty_input_is_400_without_upstream_call(client, http, route, field, message, value):
    body = {} if value is None else {field: value}
    resp = client.post(route, json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": message}
    http.post.assert_not_called()


def test_non_json_body_is_400(client, http):
    resp = client.post("/api/flashcards", data="notes=hello", content_type="text/plain")
    assert resp.status_code == 400
    http.post.assert_not_called()


def test_flashcards_pass_through_unmodified(client, upstream_json):
    upstream_json(FLASHCARDS)
    resp = client.post("/api/flashcards", json={"notes": "Photosynthesis converts light to energy"})
    assert resp.status_code == 200
    assert resp.get_json() == FLASHCARDS


def test_flashcards_prompt_carries_notes(client, http, upstream_json):
    upstream_json(FLASHCARDS)
    client.post("/api/flashcards", json={"notes": "Mitochondria make ATP"})
    sent = json.loads(http.post.call_args.kwargs["data"])
    assert sent["contents"][0]["parts"][0]["text"].endswith("Notes: Mitochondria make ATP")
    assert "flashcards" in sent["generationConfig"]["responseSchema"]["properties"]


def test_quiz_invalid_json(client, upstream_json):
    upstream_json("{not valid json")
    resp = client.post("/api/quiz", json={"text": "Some text"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "LLM returned invalid JSON structure"}


def test_quiz_missing_quiz_field(client, upstream_json):
    upstream_json({"questions": []})
    resp = client.post("/api/quiz", json={"text": "Some text"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "LLM returned invalid JSON structure"}


@pytest.mark.parametrize("correct", [4, -1, "0", True, None])
def test_quiz_bad_correct_index_is_rejected(client, upstream_json, correct):
    bad = {"quiz": [dict(QUIZ["quiz"][0], correct=correct)]}
    upstream_json(bad)
    resp = client.post("/api/quiz", json={"text": "Some text"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "LLM returned invalid JSON structure"}


def test_quiz_success(client, upstream_json):
    upstream_json(QUIZ)
    resp = client.post("/api/quiz", json={"text": "Photosynthesis happens in leaves."})
    assert resp.status_code == 200
    assert resp.get_json() == QUIZ


def test_study_buddy_answer(client, http, upstream_json):
    upstream_json("## Photosynthesis\n\nPlants turn **light** into sugar.")
    resp = client.post("/api/study-buddy", json={"question": "What is photosynthesis?"})
    assert resp.status_code == 200
    assert resp.get_json() == {"answer": "## Photosynthesis\n\nPlants turn **light** into sugar."}
    sent = json.loads(http.post.call_args.kwargs["data"])
    assert "generationConfig" not in sent
    assert sent["contents"][0]["parts"][0]["text"] == "Question: What is photosynthesis?"


def test_study_buddy_legacy_path(client, upstream_json):
    upstream_json("an answer")
    resp = client.post("/api/studybuddy", json={"question": "why?"})
    assert resp.get_json() == {"answer": "an answer"}


@pytest.mark.parametrize("route,field,message", [
    ("/api/flashcards", "notes", "No content returned from LLM"),
    ("/api/quiz", "text", "No content returned from LLM"),
    ("/api/study-buddy", "question", "No content returned from Study Buddy"),
])
def test_no_content(client, http, make_response, route, field, message):
    http.post.side_effect = [make_response(200, {"candidates": []})]
    resp = client.post(route, json={field: "something"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": message}


@pytest.mark.parametrize("route,field,message", [
    ("/api/flashcards", "notes", "Failed to generate flashcards due to internal server error."),
    ("/api/quiz", "text", "Failed to generate quiz due to internal server error."),
    ("/api/study-buddy", "question",
     "Failed to get study buddy response due to internal server error."),
])
def test_upstream_failure(client, http, make_response, route, field, message):
    http.post.side_effect = [make_response(403)]
    resp = client.post(route, json={field: "something"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": message}
    assert http.post.call_count == 1


def test_rate_limited_then_ok(client, http, sleep, make_response, envelope):
    http.post.side_effect = [make_response(429), make_response(200, envelope(json.dumps(FLASHCARDS)))]
    resp = client.post("/api/flashcards", json={"notes": "notes"})
    assert resp.status_code == 200
    assert resp.get_json() == FLASHCARDS
    sleep.assert_called_once_with(1)


def test_health_reports_provider(client):
    resp = client.get("/api/health")
    assert resp.get_json() == {"status": "ok", "provider": "gemini"}


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_wrong_method_is_json_405(client):
    resp = client.get("/api/quiz")
    assert resp.status_code == 405
    assert "error" in resp.get_json()


@pytest.mark.parametrize("route,field,text,message", [
    ("/api/quiz", "text", {"quiz": []}, "LLM returned invalid JSON structure"),
    ("/api/flashcards", "notes", ["front", "back"], "LLM returned invalid JSON structure"),
    ("/api/study-buddy", "question", 42, "Study Buddy returned an unreadable answer"),
])
def test_non_string_generated_text_is_malformed(client, http, make_response, envelope,
                                                route, field, text, message):
    http.post.side_effect = [make_response(200, envelope(text))]
    resp = client.post(route, json={field: "something"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": message}


@pytest.mark.parametrize("options", [
    ["Oxygen", "Nitrogen"],
    ["Oxygen", "Nitrogen", "Helium", "Argon", "Neon"],
    ["Oxygen", 2, "Helium", "Argon"],
])
def test_quiz_needs_four_string_options(client, upstream_json, options):
    upstream_json({"quiz": [dict(QUIZ["quiz"][0], options=options)]})
    resp = client.post("/api/quiz", json={"text": "Some text"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "LLM returned invalid JSON structure"}
