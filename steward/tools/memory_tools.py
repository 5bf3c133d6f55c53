"""Explicit memory tools.

These are tools Claude can call when the user explicitly asks to
remember or recall something.
"""

from pydantic import Field

from steward.tools.base import ToolContext, ToolParams, ToolResult
from steward.tools.registry import registry

# -- remember_this -----------------------------------------------------------


class RememberParams(ToolParams):
    content: str = Field(description="The information to remember")


@registry.tool(
    name="remember_this",
    description=(
        "Store something in long-term memory. Use when the user says "
        "'remember X', 'save this', 'don't forget', etc."
    ),
    category="memory",
    params_model=RememberParams,
)
async def remember_this(content: str, ctx: ToolContext) -> ToolResult:
    if ctx.memory is None:
        return ToolResult(error="Memory is not enabled.")
    entry = await ctx.memory.store_memory(content, source="user")
    return ToolResult(data={"remembered": True, "id": entry.id, "count": ctx.memory.count()})


# -- recall ------------------------------------------------------------------


class RecallParams(ToolParams):
    query: str = Field(description="What to search for in memory")
    limit: int = Field(default=3, ge=1, le=20, description="Maximum number of results")


@registry.tool(
    name="recall",
    description=(
        "Search long-term memory. Use when the user asks 'what do you "
        "remember about X', 'do you know my Y', or when you need to "
        "check if you have relevant context."
    ),
    category="memory",
    params_model=RecallParams,
)
async def recall(query: str, ctx: ToolContext, limit: int = 3) -> ToolResult:
    if ctx.memory is None:
        return ToolResult(error="Memory is not enabled.")
    memories = await ctx.memory.recall_memories(query, top_k=limit)
    results = [
        {"text": m.text, "score": round(m.score, 3), "timestamp": m.timestamp}
        for m in memories
    ]
    return ToolResult(data={"results": results, "count": len(results)})
