from __future__ import annotations

import io

import pytest

from flora.services.ai.plant_advisor import EMPTY_RESPONSE_FALLBACK


def _identify(client, samples, **body):
    payload = {"image_data": samples.photo_b64, "mime_type": "image/jpeg"}
    payload.update(body)
    return client.post("/api/v1/plants/identify", json=payload)


# ========================== Identify =======================================


def test_identify_with_json_body(client, samples):
    response = _identify(client, samples)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["identified"] is True
    assert data["state"] == "identified"
    assert data["plant"]["name"] == "Monstera"
    assert data["plant"]["careGuide"]["sunlight"] == "Bright, indirect light."
    assert [m["id"] for m in data["messages"]] == ["welcome"]


def test_identify_accepts_data_url(client, samples, llm_backend):
    response = client.post(
        "/api/v1/plants/identify",
        json={"image_data": f"data:image/webp;base64,{samples.photo_b64}"},
    )

    assert response.status_code == 200
    image = llm_backend.generate.call_args.kwargs["images"][0]
    assert image.mime_type == "image/webp"
    assert image.data == samples.photo_bytes


def test_identify_with_multipart_upload(client, samples, llm_backend):
    response = client.post(
        "/api/v1/plants/identify",
        data={"image": (io.BytesIO(samples.photo_bytes), "plant.jpg", "image/jpeg")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    image = llm_backend.generate.call_args.kwargs["images"][0]
    assert image.data == samples.photo_bytes
    assert image.mime_type == "image/jpeg"


def test_identify_rejects_non_image_upload(client):
    response = client.post(
        "/api/v1/plants/identify",
        data={"image": (io.BytesIO(b"hello"), "notes.txt", "text/plain")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"image_data": "%%%not-base64%%%", "mime_type": "image/jpeg"},
        {"image_data": "aGVsbG8=", "mime_type": "application/pdf"},
        {"image_data": "aGVsbG8="},
    ],
)
def test_identify_rejects_bad_json(client, body):
    response = client.post("/api/v1/plants/identify", json=body)

    assert response.status_code == 400
    assert response.get_json()["ok"] is False


def test_identify_failure_returns_generic_message_and_keeps_session(client, samples, llm_backend):
    _identify(client, samples)
    llm_backend.generate.return_value = samples.response("")

    response = _identify(client, samples)

    assert response.status_code == 422
    body = response.get_json()
    assert body["error"]["message"] == "Sorry, I couldn't identify this plant. Please try a clearer photo."
    assert body["error"]["failure"] == "empty_response"
    session = client.get("/api/v1/plants/session").get_json()["data"]
    assert session["plant"]["name"] == "Monstera"


# ========================== Session & chat =================================


def test_session_starts_empty(client):
    data = client.get("/api/v1/plants/session").get_json()["data"]

    assert data["state"] == "empty"
    assert data["plant"] is None
    assert data["messages"] == []


def test_reading_session_stores_nothing(app):
    store = app.config["CONTAINER"].session_store

    for _ in range(5):
        data = app.test_client().get("/api/v1/plants/session").get_json()["data"]
        assert data["state"] == "empty"
        assert data["session_id"]

    assert len(store) == 0


def test_session_snapshot_after_identify(client, samples):
    _identify(client, samples)

    data = client.get("/api/v1/plants/session").get_json()["data"]

    assert data["state"] == "identified"
    assert data["session_id"]


def test_chat_round_trip(client, samples, llm_backend):
    _identify(client, samples)
    llm_backend.generate.return_value = samples.response("Water weekly.")

    response = client.post("/api/v1/plants/chat", json={"message": "How often should I water?"})

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["user_message"]["text"] == "How often should I water?"
    assert data["assistant_message"]["text"] == "Water weekly."
    assert data["assistant_message"]["role"] == "assistant"
    assert data["source"] == "llm"
    assert data["state"] == "conversing"
    assert [m["role"] for m in data["messages"]] == ["assistant", "user", "assistant"]


def test_chat_empty_model_answer_uses_fallback(client, samples, llm_backend):
    _identify(client, samples)
    llm_backend.generate.return_value = samples.response("")

    data = client.post("/api/v1/plants/chat", json={"message": "Hmm?"}).get_json()["data"]

    assert data["assistant_message"]["text"] == EMPTY_RESPONSE_FALLBACK
    assert data["source"] == "empty_response"


@pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "   "}, {"message": 5}])
def test_chat_rejects_blank_message(client, samples, body):
    _identify(client, samples)

    response = client.post("/api/v1/plants/chat", json=body)

    assert response.status_code == 400
    session = client.get("/api/v1/plants/session").get_json()["data"]
    assert len(session["messages"]) == 1


def test_chat_before_identify_is_conflict(client, app):
    response = client.post("/api/v1/plants/chat", json={"message": "What is this?"})

    assert response.status_code == 409
    assert len(app.config["CONTAINER"].session_store) == 0


def test_delete_session_resets_state(client, samples):
    _identify(client, samples)

    response = client.delete("/api/v1/plants/session")

    assert response.get_json()["data"] == {"reset": True}
    assert client.get("/api/v1/plants/session").get_json()["data"]["state"] == "empty"


def test_sessions_are_isolated_per_client(app, samples):
    first, second = app.test_client(), app.test_client()

    _identify(first, samples)

    assert second.get("/api/v1/plants/session").get_json()["data"]["state"] == "empty"


# ========================== Stateless advice ===============================


def test_advice_with_plant_context(client, samples, llm_backend):
    llm_backend.generate.return_value = samples.response("Mist the leaves.")

    response = client.post(
        "/api/v1/plants/advice",
        json={"question": "Humidity tips?", "plant": samples.plant_payload()},
    )

    assert response.status_code == 200
    assert response.get_json()["data"]["text"] == "Mist the leaves."
    assert "Monstera (Monstera deliciosa)" in llm_backend.generate.call_args.kwargs["system_prompt"]


def test_advice_without_plant_uses_generic_persona(client, samples, llm_backend):
    llm_backend.generate.return_value = samples.response("Most herbs love sun.")

    response = client.post("/api/v1/plants/advice", json={"question": "Sun for herbs?"})

    assert response.status_code == 200
    assert "asking about their" not in llm_backend.generate.call_args.kwargs["system_prompt"]


def test_advice_rejects_incomplete_plant(client, samples):
    plant = samples.plant_payload()
    del plant["careGuide"]

    response = client.post("/api/v1/plants/advice", json={"question": "?", "plant": plant})

    assert response.status_code == 400


# ========================== Health & routing ===============================


def test_health_reports_provider(client):
    data = client.get("/api/v1/health").get_json()["data"]

    assert data["status"] == "healthy"
    assert data["llm_provider"] == "mock"
    assert data["ai_available"] is True


def test_unversioned_api_prefix_is_not_served(client):
    assert client.get("/api/health/ping").status_code == 404


def test_unknown_api_route_returns_json_404(client):
    response = client.get("/api/v1/plants/nowhere")

    assert response.status_code == 404
    assert response.get_json()["ok"] is False
