"""
Agent tools: function-calling schema used to classify sprint questions.

The model is forced to call analyze_sprint_query, so its arguments carry the
structured intent instead of free text.
"""

from sprintbot.schemas.sprint import INTENTS

ANALYZE_QUERY_TOOL_NAME = "analyze_sprint_query"

# OpenAI function-calling format
ANALYZE_QUERY_TOOL = {
    "type": "function",
    "function": {
        "name": ANALYZE_QUERY_TOOL_NAME,
        "description": "Analyze a user query about Jira sprint and work items",
        "parameters": {
            "type": "object",
            "properties": {
                "intent": {
                    "type": "string",
                    "enum": list(INTENTS),
                    "description": "The intent of the user query",
                },
                "parameters": {
                    "type": "object",
                    "properties": {
                        "status_filter": {
                            "type": "string",
                            "description": 'Specific status to filter by (e.g., "Ready for Production", "Blocked")',
                        },
                        "count_only": {
                            "type": "boolean",
                            "description": "Whether the user only wants a count",
                        },
                        "include_details": {
                            "type": "boolean",
                            "description": "Whether to include detailed information about work items",
                        },
                    },
                },
                "confidence": {
                    "type": "number",
                    "minimum": 0,
                    "maximum": 1,
                    "description": "Confidence score for the analysis",
                },
            },
            "required": ["intent", "parameters", "confidence"],
        },
    },
}

ANALYZE_QUERY_TOOL_CHOICE = {"type": "function", "function": {"name": ANALYZE_QUERY_TOOL_NAME}}

ANALYSIS_SYSTEM_PROMPT = """You are a Product Manager assistant that helps analyze queries about Jira sprints and work items.
Analyze the user's question and extract the intent and relevant parameters.
Common intents include:
- sprint_status: General questions about sprint state
- work_item_count: Questions about number of work items
- ready_for_production: Questions about items ready for production
- blocked_items: Questions about blocked or stuck items
- sprint_progress: Questions about overall sprint progress"""

RESPONSE_SYSTEM_PROMPT = (
    "You are a helpful Product Manager assistant. Generate clear, concise responses about sprint status "
    "and work items. Be professional but friendly. Use bullet points when appropriate. Always provide "
    "actionable insights. Always use British English spellings in your responses."
)
