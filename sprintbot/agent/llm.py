"""
Agent LLM: OpenAI chat completions for intent analysis and answer generation.

Neither call raises. When the model is unreachable or returns something
unusable, analyze_query returns DEFAULT_ANALYSIS (fallback=True) and
generate_response returns RESPONSE_FALLBACK, so the pipeline always has a
value to continue with. This degraded behaviour is intentional.
"""

import json
import logging
from typing import Any

from openai import OpenAI

from sprintbot.agent.tools import (
    ANALYSIS_SYSTEM_PROMPT,
    ANALYZE_QUERY_TOOL,
    ANALYZE_QUERY_TOOL_CHOICE,
    RESPONSE_SYSTEM_PROMPT,
)
from sprintbot.core.config import Settings
from sprintbot.schemas.sprint import INTENTS, ProcessedQuery, SprintReport

logger = logging.getLogger(__name__)
API_TIMEOUT = 60.0

DEFAULT_ANALYSIS = ProcessedQuery(intent="sprint_status", parameters={}, confidence=0.5, fallback=True)
EMPTY_RESPONSE = "Unable to generate response"
RESPONSE_FALLBACK = "Sorry, I encountered an error while processing your request."


def parse_analysis(arguments: str | dict[str, Any]) -> ProcessedQuery:
    """Turn tool-call arguments into a ProcessedQuery. Raises ValueError on unusable input."""
    args = json.loads(arguments) if isinstance(arguments, str) else arguments
    if not isinstance(args, dict):
        raise ValueError("tool arguments are not an object")
    intent = args.get("intent")
    if intent not in INTENTS:
        intent = "unknown"
    parameters = args.get("parameters")
    if not isinstance(parameters, dict):
        parameters = {}
    try:
        confidence = float(args.get("confidence", 0.5))
    except (TypeError, ValueError):
        confidence = 0.5
    confidence = min(max(confidence, 0.0), 1.0)
    return ProcessedQuery(intent=intent, parameters=parameters, confidence=confidence)


class LLMClient:
    """Wraps the OpenAI client. Pass client= to inject a fake in tests."""

    def __init__(self, settings: Settings, client: Any = None) -> None:
        self.api_key = settings.openai_api_key
        self.model = settings.openai_model
        self.temperature = settings.openai_temperature
        self._client = client

    def _openai(self) -> Any:
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is not set")
        return OpenAI(api_key=self.api_key, timeout=API_TIMEOUT)

    def analyze_query(self, text: str) -> ProcessedQuery:
        """Classify the question. Returns DEFAULT_ANALYSIS on any failure."""
        logger.info("[llm:analyze_query] IN  text=%r", text)
        try:
            response = self._openai().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
                    {"role": "user", "content": text},
                ],
                tools=[ANALYZE_QUERY_TOOL],
                tool_choice=ANALYZE_QUERY_TOOL_CHOICE,
                temperature=self.temperature,
            )
            msg = response.choices[0].message if response.choices else None
            tool_calls = (getattr(msg, "tool_calls", None) or []) if msg else []
            if not tool_calls:
                raise ValueError("No function call returned from OpenAI")
            analysis = parse_analysis(tool_calls[0].function.arguments)
        except Exception as e:
            logger.warning("[llm:analyze_query] falling back to default analysis: %s", e)
            return DEFAULT_ANALYSIS.model_copy(deep=True)
        logger.info(
            "[llm:analyze_query] OUT intent=%s confidence=%.2f parameters=%s",
            analysis.intent,
            analysis.confidence,
            analysis.parameters,
        )
        return analysis

    def generate_response(self, report: SprintReport | None, original_query: str) -> str:
        """Write prose for the question from the report. Returns RESPONSE_FALLBACK on any failure."""
        sprint_data = report.model_dump(mode="json") if report is not None else {}
        prompt = (
            f'Original question: "{original_query}"\n\n'
            f"Sprint data: {json.dumps(sprint_data, indent=2)}\n\n"
            "Please provide a helpful response based on this data."
        )
        logger.info("[llm:generate_response] IN  query_len=%d prompt_len=%d", len(original_query), len(prompt))
        try:
            response = self._openai().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": RESPONSE_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
            )
            msg = response.choices[0].message if response.choices else None
            out = ((getattr(msg, "content", None) or "") if msg else "").strip()
        except Exception as e:
            logger.error("[llm:generate_response] OpenAI call failed: %s", e)
            return RESPONSE_FALLBACK
        logger.info("[llm:generate_response] OUT response_len=%d", len(out))
        return out or EMPTY_RESPONSE
