"""Crop-planning recommendations from a chat-completion gateway.

Without an API key (or when the gateway cannot be reached) a canned demo
scenario for the soil type is returned instead, marked ``source="demo"``.
"""
import json
import logging
import re
from typing import Optional

import httpx
from fastapi import HTTPException, status

from app.core.config import settings
from app.schemas.agroplan import AgroPlanResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert agricultural AI assistant specializing in African farming.
You provide crop recommendations based on soil type, location, and farming history.
Your recommendations should be practical, sustainable, and suitable for smallholder farmers.

Always return your response in the following JSON format:
{
  "recommendations": [
    {
      "crop": "crop name",
      "suitability": "high/medium/low",
      "reasoning": "explanation of why this crop is recommended",
      "best_planting_season": "season name",
      "expected_yield": "yield estimate",
      "sustainability_notes": "environmental impact notes"
    }
  ],
  "rotation_schedule": [
    {
      "season": "season name",
      "crops": ["crop1", "crop2"],
      "benefits": "rotation benefits"
    }
  ],
  "sustainability_score": 85,
  "sustainability_notes": "Overall sustainability assessment"
}"""

FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")

DEMO_SCENARIOS = {
    "clay": {
        "recommendations": [
            {"crop": "Rice", "suitability": "high",
             "reasoning": "Clay holds water well, which suits paddy rice.",
             "best_planting_season": "Long rains", "expected_yield": "3-5 t/ha",
             "sustainability_notes": "Rotate with legumes to restore nitrogen."},
            {"crop": "Cabbage", "suitability": "medium",
             "reasoning": "Tolerates heavy soils when drainage is managed.",
             "best_planting_season": "Short rains", "expected_yield": "30-40 t/ha",
             "sustainability_notes": "Mulch to limit surface crusting."},
        ],
        "rotation_schedule": [
            {"season": "Long rains", "crops": ["Rice"], "benefits": "Uses retained moisture"},
            {"season": "Short rains", "crops": ["Beans"], "benefits": "Fixes nitrogen"},
        ],
        "sustainability_score": 78,
        "sustainability_notes": "Improve drainage and add organic matter each season.",
    },
    "sandy": {
        "recommendations": [
            {"crop": "Cassava", "suitability": "high",
             "reasoning": "Drought tolerant and productive on light, free-draining soils.",
             "best_planting_season": "Start of rains", "expected_yield": "10-20 t/ha",
             "sustainability_notes": "Intercrop with groundnuts to cover soil."},
            {"crop": "Groundnuts", "suitability": "high",
             "reasoning": "Pods develop easily in loose sandy soil.",
             "best_planting_season": "Long rains", "expected_yield": "1-2 t/ha",
             "sustainability_notes": "Adds nitrogen for the following crop."},
        ],
        "rotation_schedule": [
            {"season": "Long rains", "crops": ["Groundnuts"], "benefits": "Nitrogen fixation"},
            {"season": "Short rains", "crops": ["Cassava"], "benefits": "Deep roots, low input"},
        ],
        "sustainability_score": 72,
        "sustainability_notes": "Add compost to raise water holding capacity.",
    },
    "loamy": {
        "recommendations": [
            {"crop": "Maize", "suitability": "high",
             "reasoning": "Loam's balance of drainage and fertility suits maize.",
             "best_planting_season": "Long rains", "expected_yield": "4-6 t/ha",
             "sustainability_notes": "Follow with beans to replace nitrogen."},
            {"crop": "Tomatoes", "suitability": "high",
             "reasoning": "Good structure and nutrients for fruiting vegetables.",
             "best_planting_season": "Dry season with irrigation", "expected_yield": "40-60 t/ha",
             "sustainability_notes": "Rotate away from nightshades for two seasons."},
        ],
        "rotation_schedule": [
            {"season": "Long rains", "crops": ["Maize", "Beans"], "benefits": "Intercrop shares nitrogen"},
            {"season": "Short rains", "crops": ["Tomatoes"], "benefits": "Breaks cereal pest cycles"},
        ],
        "sustainability_score": 85,
        "sustainability_notes": "Keep the soil covered between seasons.",
    },
}

DEFAULT_SCENARIO = {
    "recommendations": [
        {"crop": "Beans", "suitability": "medium",
         "reasoning": "Adaptable legume that improves most soils.",
         "best_planting_season": "Start of rains", "expected_yield": "1-2 t/ha",
         "sustainability_notes": "Fixes nitrogen for the next crop."},
        {"crop": "Sorghum", "suitability": "medium",
         "reasoning": "Tolerates a wide range of soils and dry spells.",
         "best_planting_season": "Long rains", "expected_yield": "2-3 t/ha",
         "sustainability_notes": "Low fertilizer needs."},
    ],
    "rotation_schedule": [
        {"season": "Long rains", "crops": ["Sorghum"], "benefits": "Hardy cereal base"},
        {"season": "Short rains", "crops": ["Beans"], "benefits": "Restores nitrogen"},
    ],
    "sustainability_score": 70,
    "sustainability_notes": "Please consult with local agricultural extension officers",
}


def build_user_prompt(soil_type: str, location: str, previous_crops: Optional[str] = None) -> str:
    lines = [
        "Please provide crop recommendations for a farmer with the following details:",
        f"- Soil Type: {soil_type}",
        f"- Location: {location}",
    ]
    if previous_crops:
        lines.append(f"- Previous Crops: {previous_crops}")
    lines.append("")
    lines.append("Consider crop rotation, local climate, market demand, and sustainability.")
    return "\n".join(lines)


def fallback_result(answer: str) -> dict:
    return {
        "recommendations": [{
            "crop": "Mixed farming recommended",
            "suitability": "medium",
            "reasoning": answer[:200],
            "best_planting_season": "Depends on location",
            "expected_yield": "Variable",
            "sustainability_notes": "AI response could not be parsed",
        }],
        "rotation_schedule": [],
        "sustainability_score": 70,
        "sustainability_notes": "Please consult with local agricultural extension officers",
    }


def parse_answer(answer: str) -> dict:
    """Pull the JSON document out of a completion, fenced or bare."""
    match = FENCED_JSON.search(answer) or FENCED_ANY.search(answer)
    candidate = match.group(1) if match else answer
    try:
        parsed = json.loads(candidate)
        return AgroPlanResult.model_validate(parsed).model_dump(exclude={"source"})
    except ValueError:
        logger.warning("Failed to parse AI response as JSON")
        return fallback_result(answer)


def demo_scenario(soil_type: str) -> dict:
    scenario = DEMO_SCENARIOS.get((soil_type or "").strip().lower(), DEFAULT_SCENARIO)
    return AgroPlanResult.model_validate({**scenario, "source": "demo"}).model_dump()


class RecommendationAdapter:
    def __init__(self, api_key: str = None, gateway_url: str = None, model: str = None,
                 timeout: float = None, transport: httpx.BaseTransport = None):
        self.api_key = settings.AI_API_KEY if api_key is None else api_key
        self.gateway_url = gateway_url or settings.AI_GATEWAY_URL
        self.model = model or settings.AI_MODEL
        self.timeout = timeout or settings.AI_TIMEOUT_SECONDS
        self.transport = transport

    def analyze(self, soil_type: str, location: str, previous_crops: Optional[str] = None) -> dict:
        if not self.api_key:
            logger.info("No AI API key configured, returning demo scenario for %s soil", soil_type)
            return demo_scenario(soil_type)

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(soil_type, location, previous_crops)},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.gateway_url, json=body, headers=headers)
        except httpx.TransportError:
            logger.warning("AI gateway unreachable, returning demo scenario", exc_info=True)
            return demo_scenario(soil_type)

        if response.status_code == 429:
            raise HTTPException(status_code=429, detail="Too many requests. Please try again in a moment.")
        if response.status_code == 402:
            raise HTTPException(status_code=402, detail="AI service requires payment. Please contact support.")
        if response.is_error:
            logger.error("AI gateway error %s: %s", response.status_code, response.text[:500])
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"AI Gateway error: {response.status_code}"
            )

        try:
            answer = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="AI Gateway returned an unexpected response"
            )

        result = parse_answer(answer or "")
        result["source"] = "ai"
        return result


def get_recommendation_adapter() -> RecommendationAdapter:
    return RecommendationAdapter()
