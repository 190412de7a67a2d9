import pytest

from nbhwc_api.models.orm import Flashcard, Puzzle, Scenario

@pytest.fixture
def content(db, catalog):
    db.add_all([
        Flashcard(topic_id=catalog["mi"], term="OARS", definition="Open questions, Affirmations, Reflections, Summaries"),
        Flashcard(topic_id=catalog["mi"], term="Change talk", definition="Client statements in favour of change"),
        Flashcard(topic_id=catalog["smart"], term="SMART", definition="Specific, Measurable, Achievable, Relevant, Time-bound"),
    ])
    scenario = Scenario(topic_id=catalog["mi"], title="Ambivalent client", description="A client unsure about exercise.",
                        start_node="start", nodes={
                            "start": {"text": "Client: I know I should walk more, but...",
                                      "choices": [{"text": "Reflect the ambivalence", "next": "good", "feedback": "Nice."},
                                                  {"text": "Tell them to walk", "next": "bad", "feedback": "Righting reflex."}]},
                            "good": {"text": "Client opens up.", "choices": []},
                            "bad": {"text": "Client shuts down.", "choices": []},
                        })
    puzzle = Puzzle(topic_id=catalog["smart"], title="Session order", instructions="Put the session phases in order.",
                    items=["Check-in", "Agenda", "Exploration", "Goal setting", "Wrap-up"])
    db.add_all([scenario, puzzle]); db.commit()
    return {"scenario": scenario.id, "puzzle": puzzle.id}

def test_decks(client, content, auth_headers):
    r = client.get("/api/flashcards", headers=auth_headers)
    assert r.json() == [{"topic": "Motivational Interviewing", "count": 2}, {"topic": "SMART Goals", "count": 1}]

def test_deck_by_topic(client, content, auth_headers):
    r = client.get("/api/flashcards/Motivational Interviewing", headers=auth_headers)
    assert [c["term"] for c in r.json()] == ["OARS", "Change talk"]
    assert client.get("/api/flashcards/HIPAA Basics", headers=auth_headers).json() == []
    assert client.get("/api/flashcards/Astrology", headers=auth_headers).status_code == 404

def test_scenarios(client, content, auth_headers):
    r = client.get("/api/scenarios", headers=auth_headers)
    assert r.json() == [{"id": content["scenario"], "title": "Ambivalent client",
                         "description": "A client unsure about exercise.", "topic": "Motivational Interviewing"}]
    r = client.get(f"/api/scenarios/{content['scenario']}", headers=auth_headers)
    detail = r.json()
    assert detail["start_node"] == "start"
    assert detail["nodes"]["start"]["choices"][0]["next"] == "good"
    assert client.get("/api/scenarios/9999", headers=auth_headers).status_code == 404

def test_puzzle_is_shuffled_and_checkable(client, content, auth_headers):
    r = client.get(f"/api/puzzles/{content['puzzle']}", headers=auth_headers)
    items = r.json()["items"]
    assert sorted(items) == sorted(["Check-in", "Agenda", "Exploration", "Goal setting", "Wrap-up"])
    url = f"/api/puzzles/{content['puzzle']}/check"
    assert client.post(url, json={"order": ["Check-in", "Agenda", "Exploration", "Goal setting", "Wrap-up"]},
                       headers=auth_headers).json() == {"correct": True}
    assert client.post(url, json={"order": ["Agenda", "Check-in", "Exploration", "Goal setting", "Wrap-up"]},
                       headers=auth_headers).json() == {"correct": False}
    assert client.get("/api/puzzles/9999", headers=auth_headers).status_code == 404

def test_content_requires_auth(client, content):
    assert client.get("/api/flashcards").status_code in (401, 403)
