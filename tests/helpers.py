"""Test doubles and builders shared by unit and integration tests."""

import json
from typing import Any

from backend.app.llm.client import GenerationError


class ScriptedGenerativeClient:
    """Generative client that replays canned responses and records prompts.

    Each entry in ``responses`` is either raw text to return or an exception
    to raise.
    """

    def __init__(self, *responses: str | Exception) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        schema_name: str,
        response_schema: dict[str, Any],
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "schema_name": schema_name,
                "response_schema": response_schema,
            }
        )
        if not self._responses:
            raise GenerationError("no scripted response left")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def generated_json(*itineraries: dict[str, Any]) -> str:
    """Serialize model output in the strict schema's envelope."""
    return json.dumps({"itineraries": list(itineraries)})


def generated_item(
    modes: list[str],
    *,
    id: str | None = None,
    total_time: int = 20,
    cost: float = 4.4,
    reasoning: str = "Good choice for a quick trip.",
    **overrides: Any,
) -> dict[str, Any]:
    """One itinerary in the model's output format (all keys present)."""
    item: dict[str, Any] = {
        "id": id,
        "total_time": total_time,
        "cost": cost,
        "walking_distance": 300,
        "transfers": 0,
        "co2_savings": 500,
        "is_accessible": True,
        "start_time": "09:00",
        "end_time": "09:20",
        "steps": [
            {
                "mode": mode,
                "instruction": f"Use {mode}",
                "duration_minutes": 5,
                "line_name": None if mode == "walk" else "8700-10",
                "color": None,
                "is_covered": None,
            }
            for mode in modes
        ],
        "ai_reasoning": reasoning,
        "safety_score": 80,
        "weather_alert": None,
        "calories_burned": 40,
        "traffic_delay_minutes": 3,
    }
    item.update(overrides)
    return item
