import json

import httpx
import pytest

from app.main import app
from app.services.recommendations import (
    RecommendationAdapter,
    get_recommendation_adapter,
    parse_answer,
    build_user_prompt,
)

AI_PLAN = {
    "recommendations": [{
        "crop": "Sorghum", "suitability": "high", "reasoning": "Dry climate",
        "best_planting_season": "Long rains", "expected_yield": "2 t/ha", "sustainability_notes": "Low input",
    }],
    "rotation_schedule": [{"season": "Short rains", "crops": ["Cowpeas"], "benefits": "Nitrogen"}],
    "sustainability_score": 88,
    "sustainability_notes": "Good",
}


def completion(content):
    return {"choices": [{"message": {"content": content}}]}


def use_gateway(handler):
    adapter = RecommendationAdapter(api_key="test-key", gateway_url="https://gateway.test/v1/chat",
                                    transport=httpx.MockTransport(handler))
    app.dependency_overrides[get_recommendation_adapter] = lambda: adapter


def test_soil_and_location_are_required(client):
    response = client.post("/agroplan/analyze", data={"location": "Nakuru"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Soil type and location are required"


def test_demo_scenario_without_api_key(client):
    response = client.post("/agroplan/analyze", data={"soilType": "Loamy", "location": "Nakuru"})
    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "demo"
    assert body["recommendations"][0]["crop"] == "Maize"
    assert body["sustainability_score"] == 85


def test_unknown_soil_gets_default_demo(client):
    body = client.post("/agroplan/analyze", data={"soilType": "volcanic", "location": "Kisii"}).json()
    assert body["source"] == "demo"
    assert body["recommendations"]


def test_gateway_answer_in_code_fence(client):
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion("Here you go:\n```json\n" + json.dumps(AI_PLAN) + "\n```"))

    use_gateway(handler)
    response = client.post(
        "/agroplan/analyze", data={"soilType": "sandy", "location": "Turkana", "previousCrops": "maize"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "ai"
    assert body["recommendations"][0]["crop"] == "Sorghum"
    assert body["sustainability_score"] == 88
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["messages"][0]["role"] == "system"
    assert "Previous Crops: maize" in seen["body"]["messages"][1]["content"]


def test_unparseable_answer_falls_back(client):
    use_gateway(lambda request: httpx.Response(200, json=completion("Plant whatever grows nearby.")))
    body = client.post("/agroplan/analyze", data={"soilType": "clay", "location": "Kisumu"}).json()
    assert body["recommendations"][0]["crop"] == "Mixed farming recommended"
    assert body["recommendations"][0]["reasoning"] == "Plant whatever grows nearby."
    assert body["sustainability_score"] == 70


@pytest.mark.parametrize("gateway_status,expected", [(429, 429), (402, 402), (503, 500)])
def test_gateway_errors(client, gateway_status, expected):
    use_gateway(lambda request: httpx.Response(gateway_status, text="nope"))
    response = client.post("/agroplan/analyze", data={"soilType": "clay", "location": "Kisumu"})
    assert response.status_code == expected


def test_unreachable_gateway_uses_demo(client):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    use_gateway(handler)
    body = client.post("/agroplan/analyze", data={"soilType": "clay", "location": "Kisumu"}).json()
    assert body["source"] == "demo"
    assert body["recommendations"][0]["crop"] == "Rice"


def test_analysis_is_saved_for_known_user(client, farmer):
    client.post("/agroplan/analyze", data={"soilType": "loamy", "location": "Nakuru", "userId": str(farmer.id)})
    client.post("/agroplan/analyze", data={"soilType": "clay", "location": "Nakuru", "userId": "999"})

    history = client.get("/agroplan/history", params={"userId": farmer.id}).json()
    assert len(history) == 1
    assert history[0]["soil_type"] == "loamy"
    assert history[0]["sustainability_score"] == 85


def test_photo_must_be_an_image(client):
    response = client.post(
        "/agroplan/analyze",
        data={"soilType": "loamy", "location": "Nakuru"},
        files={"image": ("field.exe", b"MZ", "application/octet-stream")},
    )
    assert response.status_code == 400


def test_parse_answer_accepts_bare_json():
    assert parse_answer(json.dumps(AI_PLAN))["recommendations"][0]["crop"] == "Sorghum"


def test_parse_answer_rejects_wrong_shape():
    result = parse_answer(json.dumps([1, 2, 3]))
    assert result["recommendations"][0]["crop"] == "Mixed farming recommended"


def test_user_prompt_omits_missing_history():
    prompt = build_user_prompt("silty", "Kano")
    assert "Soil Type: silty" in prompt
    assert "Previous Crops" not in prompt
