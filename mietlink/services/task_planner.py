"""Obligations -> move-out checklist, as a small langgraph pipeline.

    extract  free-text obligations go to the extractor, structured items pass through
    derive   due dates from the property's earliest exit, malformed items set aside
    persist  one savepoint per task
"""
from datetime import date
from typing import Any, Dict, List, Optional

from langchain_core.runnables import RunnableConfig, RunnableLambda
from langgraph.graph import StateGraph, END
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from mietlink.domain.tasks import DraftBatch, build_drafts
from mietlink.services import gemini
from mietlink.services.task_generator import GenerationResult, persist_drafts

logger = get_logger()


class TaskPlanState(BaseModel):
    property_id: str
    earliest_exit: Optional[date] = None
    obligations: List[Any] = []
    items: List[Any] = []
    batch: Any = None
    result: Any = None


async def extract_step(state: TaskPlanState, config: RunnableConfig) -> Dict[str, Any]:
    texts = [o.strip() for o in state.obligations if isinstance(o, str) and o.strip()]
    structured = [o for o in state.obligations if not isinstance(o, str)]
    items = list(structured)
    if texts:
        extracted = await gemini.generate_tasks(texts)
        logger.debug("Obligations converted to tasks", property_id=state.property_id, obligations=len(texts), tasks=len(extracted))
        items.extend(extracted)
    return {"items": items}


async def derive_step(state: TaskPlanState, config: RunnableConfig) -> Dict[str, Any]:
    return {"batch": build_drafts(state.items, state.earliest_exit)}


async def persist_step(state: TaskPlanState, config: RunnableConfig) -> Dict[str, Any]:
    db: AsyncSession = config["configurable"]["db"]
    property_id = config["configurable"]["property_pk"]
    return {"result": await persist_drafts(db, property_id, state.batch or DraftBatch())}


def build_graph():
    graph = StateGraph(TaskPlanState)
    graph.add_node("extract", RunnableLambda(extract_step))
    graph.add_node("derive", RunnableLambda(derive_step))
    graph.add_node("persist", RunnableLambda(persist_step))
    graph.add_edge("extract", "derive")
    graph.add_edge("derive", "persist")
    graph.add_edge("persist", END)
    graph.set_entry_point("extract")
    return graph.compile()


async def run_task_planning(
    db: AsyncSession, property_id, obligations: List[Any], earliest_exit: Optional[date]
) -> GenerationResult:
    state = TaskPlanState(property_id=str(property_id), earliest_exit=earliest_exit, obligations=list(obligations))
    try:
        final = await build_graph().ainvoke(
            state, config={"configurable": {"db": db, "property_pk": property_id}}
        )
    except Exception as e:
        logger.error("Task planning failed", property_id=str(property_id), error=str(e))
        raise  # the router decides what a failed extraction means for the request
    result = final.get("result") if isinstance(final, dict) else getattr(final, "result", None)
    return result or GenerationResult()
