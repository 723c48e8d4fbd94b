"""Client for the external AI-assisted planner.

Sends the serialized planning request to an OpenAI-compatible chat completions
endpoint and validates the JSON plan it returns.

DESIGN DECISIONS:
- One attempt per run, bounded by an explicit timeout (no retries)
- Every failure surfaces as AssistedPlannerError with a code; the caller
  decides what to do (the orchestrator falls back to the greedy allocator)
- The response is only trusted after schema validation; recipe ids are
  checked against the real pool by the orchestrator
"""

import json
import logging
import os
from typing import Any, Dict, Optional

import requests

from pantryplan.data_layer.exceptions import AssistedPlannerError
from pantryplan.planning.wire_format import AssistedPlan, PlanRequestPayload, parse_response

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a meal planning assistant. Build a weekly meal plan from the given recipes. "
    "Prioritize recipes that use pantry items closest to expiry, prefer recipes that share "
    "ingredients with each other to keep the shopping list short, and avoid repeating a "
    "recipe on consecutive days or more than 3 times per week. Only use recipe ids from the "
    "request and keep any existingAssignments unchanged. "
    "Respond with a JSON object of the form "
    '{"mealPlan": [{"dayIndex": 0-6, "mealType": "breakfast|lunch|dinner", '
    '"recipeId": "...", "reasoning": "..."}], '
    '"explanations": {"pantryUsage": "...", "expiryOptimization": "...", '
    '"varietyStrategy": "...", "suggestedRecipesUsage": "..."}}.'
)


class AssistedPlanner:
    """Client for an OpenAI-compatible planning model.

    Usage:
        planner = AssistedPlanner(api_key="sk-...")
        # or
        planner = AssistedPlanner.from_env()  # reads PANTRYPLAN_AI_API_KEY

        plan = planner.plan(request)
        for day_index, meal_type, recipe_id in plan.assignments:
            ...
    """

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_TIMEOUT = 30.0

    def __init__(self,
                 api_key: str,
                 base_url: str = DEFAULT_BASE_URL,
                 model: str = DEFAULT_MODEL,
                 timeout: float = DEFAULT_TIMEOUT):
        """Initialize assisted planner client.

        Args:
            api_key: API key for the chat completions endpoint
            base_url: Endpoint base URL (without /chat/completions)
            model: Model name
            timeout: Request timeout in seconds

        Raises:
            ValueError: If the API key is empty or the timeout is not positive
        """
        if not api_key or not api_key.strip():
            raise ValueError("API key is required for the assisted planner")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_env(cls, env_var: str = "PANTRYPLAN_AI_API_KEY") -> "AssistedPlanner":
        """Create client from environment variables.

        Reads the key from ``env_var`` and the optional PANTRYPLAN_AI_BASE_URL,
        PANTRYPLAN_AI_MODEL and PANTRYPLAN_AI_TIMEOUT overrides.

        Raises:
            ValueError: If the key variable is not set or the timeout is not a number
        """
        api_key = os.environ.get(env_var)
        if not api_key:
            raise ValueError(f"Environment variable {env_var} not set")
        timeout_raw = os.environ.get("PANTRYPLAN_AI_TIMEOUT")
        try:
            timeout = float(timeout_raw) if timeout_raw else cls.DEFAULT_TIMEOUT
        except ValueError:
            raise ValueError(f"PANTRYPLAN_AI_TIMEOUT must be a number, got {timeout_raw!r}") from None
        return cls(
            api_key=api_key,
            base_url=os.environ.get("PANTRYPLAN_AI_BASE_URL") or cls.DEFAULT_BASE_URL,
            model=os.environ.get("PANTRYPLAN_AI_MODEL") or cls.DEFAULT_MODEL,
            timeout=timeout,
        )

    def plan(self, request: PlanRequestPayload) -> AssistedPlan:
        """Ask the model for a plan.

        Args:
            request: Serialized planning request (see wire_format.build_request)

        Returns:
            Validated AssistedPlan

        Raises:
            AssistedPlannerError: On timeout, transport failure, non-2xx status,
                malformed JSON or a response that does not match the schema
        """
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": json.dumps(request.model_dump())},
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.2,
        }
        completion = self._make_request(body)
        content = self._extract_content(completion)
        plan = parse_response(content)
        logger.info("Assisted planner returned %d assignments", len(plan.assignments))
        return plan

    def _make_request(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST to the chat completions endpoint.

        Raises:
            AssistedPlannerError: If the request fails or the body is not JSON
        """
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(url, json=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise AssistedPlannerError(
                AssistedPlannerError.TIMEOUT, f"Assisted planner timed out after {self.timeout}s"
            )
        except requests.exceptions.ConnectionError:
            raise AssistedPlannerError(
                AssistedPlannerError.CONNECTION_ERROR, "Failed to connect to assisted planner"
            )
        except requests.exceptions.RequestException as e:
            raise AssistedPlannerError(AssistedPlannerError.API_ERROR, f"Request failed: {str(e)}")

        if response.status_code == 429:
            raise AssistedPlannerError(
                AssistedPlannerError.API_ERROR, "Assisted planner rate limit reached"
            )
        if not 200 <= response.status_code < 300:
            raise AssistedPlannerError(
                AssistedPlannerError.API_ERROR,
                f"Assisted planner returned status {response.status_code}",
            )

        try:
            return response.json()
        except ValueError as e:
            raise AssistedPlannerError(
                AssistedPlannerError.MALFORMED_RESPONSE, f"Response body is not JSON: {e}"
            )

    @staticmethod
    def _extract_content(completion: Any) -> Optional[str]:
        """Message content of the first choice.

        Raises:
            AssistedPlannerError: If the completion has no message content
        """
        try:
            content = completion["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise AssistedPlannerError(
                AssistedPlannerError.MALFORMED_RESPONSE, "Completion has no message content"
            ) from None
        if not isinstance(content, str) or not content.strip():
            raise AssistedPlannerError(
                AssistedPlannerError.MALFORMED_RESPONSE, "Completion message content is empty"
            )
        return content
