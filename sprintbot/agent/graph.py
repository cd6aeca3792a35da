"""
LangGraph agent: notify → analyze → fetch report → generate → format and deliver.

Two graphs share the same nodes:
  - chat graph (Slack and /api/test/query): posts a processing notice, answers
    from the full sprint report, and delivers the formatted text to chat.
  - demo graph (/api/demo/query): no chat delivery; an assignee question
    ("What is X working on?") is answered from that person's items instead of
    the full report, and the formatted text is returned to the caller.
"""

import logging
from typing import Any, Literal, TypedDict

from langgraph.graph import END, StateGraph

from sprintbot.agent.assignee import build_assignee_prompt, extract_assignee, partition_assignee_items
from sprintbot.agent.llm import LLMClient
from sprintbot.core.config import Settings
from sprintbot.schemas.sprint import ProcessedQuery, SprintReport
from sprintbot.services.formatting import format_for_slack
from sprintbot.services.notifier import ChatNotifier, create_notifier
from sprintbot.services.tracker import TrackerClient, create_tracker_client

logger = logging.getLogger(__name__)

# Lowercased substrings that mark a chat message as a sprint question.
SPRINT_KEYWORDS: tuple[str, ...] = (
    "sprint",
    "work item",
    "work items",
    "ready for production",
    "blocked",
    "progress",
    "status",
    "how many",
    "count",
)

INTEGRATION_TEST_QUERY = "How many work items are ready for production?"
INTEGRATION_TEST_MESSAGE = "🧪 Integration test successful!"


class AgentState(TypedDict, total=False):
    query: str
    channel: str | None
    thread_ts: str | None
    analysis: ProcessedQuery
    report: SprintReport
    answer: str
    delivered: bool


def is_sprint_question(message: str) -> bool:
    lowered = message.lower()
    return any(keyword in lowered for keyword in SPRINT_KEYWORDS)


class QueryAgent:
    """Composes the tracker, language-model client, and chat notifier."""

    def __init__(self, tracker: TrackerClient, llm: LLMClient, notifier: ChatNotifier) -> None:
        self.tracker = tracker
        self.llm = llm
        self.notifier = notifier
        self._chat_graph = self._build_chat_graph()
        self._demo_graph = self._build_demo_graph()

    # --- Nodes ---

    def _notify_processing(self, state: AgentState) -> dict:
        # Result ignored; the notice is best-effort.
        self.notifier.send_processing_message(state.get("channel"), state.get("thread_ts"))
        return {"delivered": False}

    def _analyze_query(self, state: AgentState) -> dict:
        analysis = self.llm.analyze_query(state["query"])
        logger.info(
            "[graph:analyze_query] OUT intent=%s confidence=%.2f fallback=%s",
            analysis.intent,
            analysis.confidence,
            analysis.fallback,
        )
        return {"analysis": analysis}

    def _fetch_report(self, state: AgentState) -> dict:
        report = self.tracker.generate_sprint_report()
        logger.info(
            "[graph:fetch_report] OUT sprint=%r total=%d ready=%d blocked=%d",
            report.sprint.name,
            report.total_items,
            report.ready_for_production,
            report.blocked,
        )
        return {"report": report}

    def _generate_response(self, state: AgentState) -> dict:
        answer = self.llm.generate_response(state["report"], state["query"])
        return {"answer": answer}

    def _summarise_assignee(self, state: AgentState) -> dict:
        person = extract_assignee(state["query"]) or ""
        main, other = partition_assignee_items(state["report"], person)
        logger.info("[graph:summarise_assignee] person=%r main=%d other=%d", person, len(main), len(other))
        prompt = build_assignee_prompt(person, main, other)
        return {"answer": self.llm.generate_response(None, prompt)}

    def _format_answer(self, state: AgentState) -> dict:
        return {"answer": format_for_slack(state.get("answer") or "")}

    def _format_and_deliver(self, state: AgentState) -> dict:
        answer = format_for_slack(state.get("answer") or "")
        delivered = self.notifier.send_message(answer, state.get("channel"), state.get("thread_ts"))
        if delivered:
            logger.info("[graph:format_and_deliver] Query processed successfully")
        else:
            logger.error("[graph:format_and_deliver] Failed to send response to Slack")
        return {"answer": answer, "delivered": delivered}

    def _route_after_report(self, state: AgentState) -> Literal["summarise_assignee", "generate_response"]:
        assignee = extract_assignee(state["query"])
        next_node = "summarise_assignee" if assignee else "generate_response"
        logger.info("[graph:route_after_report] assignee=%r -> %s", assignee, next_node)
        return next_node

    # --- Graphs ---

    def _build_chat_graph(self):
        graph = StateGraph(AgentState)
        graph.add_node("notify_processing", self._notify_processing)
        graph.add_node("analyze_query", self._analyze_query)
        graph.add_node("fetch_report", self._fetch_report)
        graph.add_node("generate_response", self._generate_response)
        graph.add_node("format_and_deliver", self._format_and_deliver)

        graph.set_entry_point("notify_processing")
        graph.add_edge("notify_processing", "analyze_query")
        graph.add_edge("analyze_query", "fetch_report")
        graph.add_edge("fetch_report", "generate_response")
        graph.add_edge("generate_response", "format_and_deliver")
        graph.add_edge("format_and_deliver", END)
        return graph.compile()

    def _build_demo_graph(self):
        graph = StateGraph(AgentState)
        graph.add_node("analyze_query", self._analyze_query)
        graph.add_node("fetch_report", self._fetch_report)
        graph.add_node("summarise_assignee", self._summarise_assignee)
        graph.add_node("generate_response", self._generate_response)
        graph.add_node("format_answer", self._format_answer)

        graph.set_entry_point("analyze_query")
        graph.add_edge("analyze_query", "fetch_report")
        graph.add_conditional_edges("fetch_report", self._route_after_report)
        graph.add_edge("summarise_assignee", "format_answer")
        graph.add_edge("generate_response", "format_answer")
        graph.add_edge("format_answer", END)
        return graph.compile()

    # --- Entry points ---

    def process_query(self, message: str, channel: str | None = None, thread_ts: str | None = None) -> bool:
        """
        Answer a question in chat. Returns whether the answer was delivered.

        Never raises: a failure after intent analysis is reported to chat with
        the original query and the error text. That error notice is
        best-effort and its own result is ignored.
        """
        logger.info("[agent:process_query] START query=%r channel=%s thread_ts=%s", message, channel, thread_ts)
        initial: AgentState = {"query": message, "channel": channel, "thread_ts": thread_ts}
        try:
            final: dict[str, Any] = self._chat_graph.invoke(initial)
        except Exception as e:
            logger.exception("[agent:process_query] Error processing query")
            error_text = getattr(e, "message", None) or str(e) or "Unknown error occurred"
            self.notifier.send_error_response(error_text, message)
            return False
        delivered = bool(final.get("delivered"))
        logger.info("[agent:process_query] END delivered=%s answer_len=%d", delivered, len(final.get("answer") or ""))
        return delivered

    def handle_slack_event(self, event: dict[str, Any]) -> bool:
        """Process a Slack message event if it is a human sprint question. Returns whether it was processed."""
        try:
            message = event.get("text") or ""
            if event.get("bot_id") or not message.strip():
                return False
            if not is_sprint_question(message):
                logger.info("[agent:handle_slack_event] Ignoring non-sprint query: %r", message)
                return False
            logger.info("[agent:handle_slack_event] Sprint query from %s: %r", event.get("user"), message)
            self.process_query(message, event.get("channel"), event.get("thread_ts"))
            return True
        except Exception:
            logger.exception("[agent:handle_slack_event] Error handling Slack event")
            return False

    def generate_sprint_summary(self) -> SprintReport:
        return self.tracker.generate_sprint_report()

    def test_integration(self) -> None:
        """Exercise all three external clients once. Raises if the tracker fails."""
        logger.info("[agent:test_integration] Testing OpenAI...")
        analysis = self.llm.analyze_query(INTEGRATION_TEST_QUERY)
        logger.info("[agent:test_integration] OpenAI: intent=%s fallback=%s", analysis.intent, analysis.fallback)

        logger.info("[agent:test_integration] Testing Jira...")
        report = self.tracker.generate_sprint_report()
        logger.info("[agent:test_integration] Jira: sprint=%r total=%d", report.sprint.name, report.total_items)

        logger.info("[agent:test_integration] Testing Slack...")
        sent = self.notifier.send_message(INTEGRATION_TEST_MESSAGE)
        logger.info("[agent:test_integration] Slack: sent=%s", sent)

    def answer_demo_query(self, message: str) -> str:
        """Run the demo graph and return the chat-formatted answer. Tracker errors propagate."""
        logger.info("[agent:answer_demo_query] START query=%r", message)
        final: dict[str, Any] = self._demo_graph.invoke({"query": message})
        answer = final.get("answer") or ""
        logger.info("[agent:answer_demo_query] END answer_len=%d", len(answer))
        return answer


def build_agent(settings: Settings) -> QueryAgent:
    """Choose live or mock clients once from the settings and wire them into the agent."""
    return QueryAgent(
        tracker=create_tracker_client(settings),
        llm=LLMClient(settings),
        notifier=create_notifier(settings),
    )
