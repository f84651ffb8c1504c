"""LangGraph StateGraph for project genesis: scoping questions -> whiteboard synthesis."""

from langgraph.graph import END, StateGraph

from genesis.agents.accumulator import ContextAccumulator
from genesis.agents.scoping import generate_scoping_questions
from genesis.state import GenesisState


def _aligned_answers(questions: list[str], answers: list[str]) -> list[str]:
    """Pad or trim answers so there is exactly one (possibly empty) per question."""
    answers = list(answers)[: len(questions)]
    return answers + [""] * (len(questions) - len(answers))


async def questioning_node(state: GenesisState) -> dict:
    """Ask the scoping questions and open one empty answer slot per question."""
    questions = await generate_scoping_questions(state["idea"])
    return {"questions": questions, "answers": [""] * len(questions)}


async def planning_node(state: GenesisState) -> dict:
    """Synthesize the initial whiteboard from the idea and the answered questions."""
    answers = _aligned_answers(state["questions"], state.get("answers", []))
    qa_pairs = [
        {"question": q, "answer": a} for q, a in zip(state["questions"], answers)
    ]
    whiteboard = await ContextAccumulator().synthesize_initial(state["idea"], qa_pairs)
    return {"answers": answers, "whiteboard": whiteboard}


# --- Build the graph ---

workflow = StateGraph(GenesisState)

workflow.add_node("questioning", questioning_node)
workflow.add_node("planning", planning_node)

workflow.set_entry_point("questioning")

workflow.add_edge("questioning", "planning")
workflow.add_edge("planning", END)

graph = workflow.compile()


def initial_state(idea: str) -> GenesisState:
    return {"idea": idea, "questions": [], "answers": [], "whiteboard": ""}


async def run_quick_genesis(idea: str) -> GenesisState:
    """Run the whole graph without pausing for answers (all answers left blank)."""
    return await graph.ainvoke(initial_state(idea))


# --- Step-execution helpers for the interactive wizard ---

_NODE_FNS = {
    "questioning": questioning_node,
    "planning": planning_node,
}


async def run_single_step(state: GenesisState, node_name: str) -> GenesisState:
    """Run a single node and return the updated state.

    Used by the wizard controller, which pauses between nodes to collect answers.
    """
    node_fn = _NODE_FNS[node_name]
    updates = await node_fn(state)
    return {**state, **updates}
