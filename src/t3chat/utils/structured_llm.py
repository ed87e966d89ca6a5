"""Structured LLM output with Pydantic validation."""

import json
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from t3chat.core.exceptions import T3ChatError
from t3chat.utils.llm import ModelHandle
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)


T = TypeVar("T", bound=BaseModel)


class StructuredOutputError(T3ChatError):
    """Raised when LLM output is not valid JSON for the schema."""

    def __init__(self, message: str, raw_output: str = ""):
        super().__init__(message)
        self.raw_output = raw_output


class StructuredLLMCaller:
    """
    Calls a model expecting JSON output matching a Pydantic schema.

    The schema is appended to the system prompt. Output wrapped in
    markdown fences or surrounded by prose is unwrapped before parsing.
    """

    def __init__(self, model: ModelHandle):
        self.model = model

    async def call(
        self,
        prompt: str,
        response_model: Type[T],
        system: str | None = None,
        max_tokens: int = 4000,
        temperature: float | None = 0.3,
    ) -> T:
        """
        Call the model once and parse its response into a Pydantic model.

        Args:
            prompt: User prompt requesting structured output
            response_model: Pydantic model class for validation
            system: System prompt (schema instructions are appended)
            max_tokens: Output token limit
            temperature: Sampling temperature

        Returns:
            Validated Pydantic model instance

        Raises:
            StructuredOutputError: Output is not JSON or fails validation
        """
        schema_instruction = self._build_schema_instruction(
            response_model.model_json_schema()
        )
        full_system = f"{system or ''}\n\n{schema_instruction}".strip()

        response = await self.model.complete(
            prompt=prompt,
            system=full_system,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        raw_output = response.content

        try:
            data = json.loads(self._extract_json(raw_output))
        except json.JSONDecodeError as e:
            raise StructuredOutputError(
                f"Invalid JSON: {e.msg} at position {e.pos}", raw_output=raw_output[:500]
            ) from e

        try:
            result = response_model.model_validate(data)
        except ValidationError as e:
            raise StructuredOutputError(
                f"Schema validation failed:\n{self._format_validation_errors(e)}",
                raw_output=raw_output[:500],
            ) from e

        logger.debug("Parsed structured output", schema=response_model.__name__)
        return result

    def _build_schema_instruction(self, schema: dict[str, Any]) -> str:
        """Build instruction telling the model the expected schema."""
        return f"""You MUST respond with valid JSON matching this schema:

```json
{json.dumps(schema, indent=2)}
```

Rules:
1. Output ONLY valid JSON, no explanations before or after
2. All required fields must be present
3. Field types must match the schema exactly"""

    def _extract_json(self, text: str) -> str:
        """Extract JSON from response, handling markdown code blocks."""
        text = text.strip()

        if "```json" in text:
            start = text.find("```json") + 7
            end = text.find("```", start)
            if end > start:
                return text[start:end].strip()

        if "```" in text:
            start = text.find("```") + 3
            newline = text.find("\n", start)
            if newline != -1 and newline - start < 20:
                start = newline + 1
            end = text.find("```", start)
            if end > start:
                return text[start:end].strip()

        start = text.find("{")
        if start != -1:
            depth = 0
            in_string = False
            escape = False
            for i, char in enumerate(text[start:], start):
                if escape:
                    escape = False
                    continue
                if char == "\\":
                    escape = True
                    continue
                if char == '"':
                    in_string = not in_string
                    continue
                if in_string:
                    continue
                if char == "{":
                    depth += 1
                elif char == "}":
                    depth -= 1
                    if depth == 0:
                        return text[start : i + 1]

        return text

    def _format_validation_errors(self, error: ValidationError) -> str:
        errors = []
        for e in error.errors():
            loc = " -> ".join(str(x) for x in e["loc"])
            errors.append(f"- Field '{loc}': {e['msg']}")
        return "\n".join(errors)
