"""Generation service backed by the OpenAI Responses API."""
import json
import logging
import re
from json import JSONDecodeError
from typing import Any, Dict, Optional, Type

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from mealplan.utilities.config import OPENAI_API_KEY, OPENAI_MODEL
from mealplan.utilities.constants import GENERATION_INSTRUCTIONS
from mealplan.utilities.errors import GenerationError

logger = logging.getLogger(__name__)


# === Text Cleaning Helpers ===
def _strip_code_fences(text: str) -> str:
    """Remove common markdown code fences and leading/trailing whitespace."""
    text = re.sub(r"```(?:json)?\n(.*?)```", r"\1", text, flags=re.S)
    text = re.sub(r"^```|```$", "", text)
    return text.strip()


def _remove_trailing_commas(text: str) -> str:
    return re.sub(r",\s*(\}|\])", r"\1", text)


def _extract_json_by_balancing(text: str) -> Optional[str]:
    """Extract the first JSON object/array by balancing braces/brackets."""
    start = None
    stack = []
    in_string = False
    escape = False

    for i, ch in enumerate(text):
        if ch == '"' and not escape:
            in_string = not in_string
        if in_string and ch == "\\" and not escape:
            escape = True
            continue
        escape = False

        if not in_string:
            if ch in "{[":
                if start is None:
                    start = i
                stack.append(ch)
            elif ch in "}]":
                if not stack:
                    continue
                opening = stack.pop()
                if (opening == "{" and ch != "}") or (opening == "[" and ch != "]"):
                    return None
                if not stack and start is not None:
                    return text[start:i + 1]
    return None


def parse_json_output(raw: str) -> Any:
    """Decode model output that should be JSON but may be wrapped in prose or fences."""
    text = (raw or "").strip()
    if not text:
        raise GenerationError("Generation service returned an empty response")
    try:
        return json.loads(text)
    except JSONDecodeError:
        pass
    cleaned = _remove_trailing_commas(_strip_code_fences(text))
    for candidate in (cleaned, _extract_json_by_balancing(cleaned)):
        if not candidate:
            continue
        try:
            return json.loads(_remove_trailing_commas(candidate))
        except JSONDecodeError:
            continue
    raise GenerationError("Generation service output is not valid JSON")


def build_prompt(payload: Dict[str, Any], output_schema: Type[BaseModel]) -> str:
    task = payload.get("task", "plan")
    instructions = GENERATION_INSTRUCTIONS.get(task, "")
    return (
        f"{instructions}\n\n"
        f"Constraints (JSON):\n{json.dumps(payload, ensure_ascii=False, indent=2)}\n\n"
        f"Answer with a single JSON object matching this JSON schema and nothing else:\n"
        f"{json.dumps(output_schema.model_json_schema(), ensure_ascii=False)}"
    )


class OpenAIGenerator:
    """Sends a constraint payload to the model and validates the answer against a pydantic schema.

    Any failure (network, empty output, invalid JSON, schema mismatch) is
    raised as GenerationError; callers decide whether that is fatal.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: str = OPENAI_MODEL):
        self._client = client
        self.model = model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not OPENAI_API_KEY:
                raise GenerationError("OPENAI_API_KEY not set; cannot call the generation service")
            self._client = AsyncOpenAI(api_key=OPENAI_API_KEY)
        return self._client

    async def generate(self, payload: Dict[str, Any], output_schema: Type[BaseModel]) -> BaseModel:
        task = payload.get("task", "plan")
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=build_prompt(payload, output_schema),
            )
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Generation call '{task}' failed: {e}") from e

        data = parse_json_output(response.output_text)
        try:
            return output_schema.model_validate(data)
        except ValidationError as e:
            logger.warning("Output of task '%s' does not match %s", task, output_schema.__name__)
            raise GenerationError(f"Output of task '{task}' does not match {output_schema.__name__}") from e
