"""
Per-file analysis graph (LangGraph).

    START ──► pattern_scan ──┐
      │                      ├──► merge_findings ──► END
      └────► ai_review ──────┘

The pattern layer and the LLM layer run in parallel; the merge node waits
for both. The graph is compiled once per run and invoked once per file.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field

from langgraph.graph import END, START, StateGraph

from llm_client import LLMCall, LLMResponse, LLMTimeoutError, LLMUnavailableError
from merge import merge
from models import AIReview, Finding
from normalizer import normalize
from pattern_engine import evaluate
from prompts import build_review_prompt
from rules import RuleCatalog

logger = logging.getLogger(__name__)


# =============================================================================
# STATE DEFINITION
# =============================================================================
@dataclass
class FileState:
    """
    State that flows through the per-file graph.

    pattern_scan and ai_review run in the same step, so they must write to
    disjoint fields.
    """

    # Input (required)
    path: str
    content: str
    language: str

    # Written by pattern_scan
    pattern_findings: list[Finding] = field(default_factory=list)

    # Written by ai_review
    ai_review: AIReview | None = None
    ai_unavailable: str | None = None  # reason the AI layer was skipped
    input_tokens: int = 0
    output_tokens: int = 0
    model: str | None = None
    error: str | None = None

    # Written by merge_findings
    issues: list[Finding] = field(default_factory=list)


# =============================================================================
# HELPERS
# =============================================================================
def call_with_timeout(llm: LLMCall, prompt: str, timeout: float) -> LLMResponse:
    """Run one LLM call with a hard deadline; raises LLMTimeoutError."""
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="llm-call")
    future = executor.submit(llm, prompt)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        future.cancel()
        raise LLMTimeoutError(f"LLM call timed out after {timeout:g}s") from None
    finally:
        # A call past its deadline keeps its "llm-call" thread until the
        # client's own HTTP timeout (config.LLM_TIMEOUT) ends it.
        executor.shutdown(wait=False)


# =============================================================================
# GRAPH CONSTRUCTION
# =============================================================================
def build_file_graph(
    llm: LLMCall | None,
    catalog: RuleCatalog,
    analysis_type: str = "review",
    llm_timeout: float = 120.0,
):
    """
    Build and compile the per-file graph.

    Args:
        llm: LLM collaborator, or None to run the pattern layer only
        catalog: Rule catalog for the pattern layer
        analysis_type: Prompt focus (review, security, quality, complexity)
        llm_timeout: Hard deadline in seconds for each LLM call
    """

    def pattern_scan(state: FileState) -> dict:
        """Reads: content, language. Writes: pattern_findings."""
        findings = evaluate(state.content, state.language, catalog, path=state.path)
        return {"pattern_findings": findings}

    def ai_review(state: FileState) -> dict:
        """
        Reads: path, content, language.
        Writes: ai_review, token counts, model, ai_unavailable or error.
        """
        if llm is None:
            return {}

        prompt = build_review_prompt(
            state.content, state.language, state.path, analysis_type
        )
        try:
            response = call_with_timeout(llm, prompt, llm_timeout)
        except LLMUnavailableError as e:
            logger.warning("   AI unavailable for %s: %s", state.path, e)
            return {"ai_unavailable": str(e)}
        except Exception as e:
            logger.error("   AI review failed for %s: %s", state.path, e)
            return {"error": str(e) or type(e).__name__}

        return {
            "ai_review": normalize(response.text),
            "input_tokens": response.input_tokens,
            "output_tokens": response.output_tokens,
            "model": response.model or None,
        }

    def merge_findings(state: FileState) -> dict:
        """Reads: pattern_findings, ai_review, error. Writes: issues."""
        if state.error:
            return {"issues": []}

        ai_issues = state.ai_review.issues if state.ai_review else []
        return {"issues": merge(state.pattern_findings, ai_issues, file=state.path)}

    graph = StateGraph(FileState)

    graph.add_node("pattern_scan", pattern_scan)
    graph.add_node("ai_review", ai_review)
    graph.add_node("merge_findings", merge_findings)

    # START → both layers (parallel execution)
    graph.add_edge(START, "pattern_scan")
    graph.add_edge(START, "ai_review")

    # both layers → merge (waits for both to complete)
    graph.add_edge("pattern_scan", "merge_findings")
    graph.add_edge("ai_review", "merge_findings")

    graph.add_edge("merge_findings", END)

    return graph.compile()


def analyze_file(graph, path: str, content: str, language: str) -> dict:
    """Invoke the compiled graph for one file and return the final state."""
    return graph.invoke(FileState(path=path, content=content, language=language))
