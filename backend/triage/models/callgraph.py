"""
Call Graph Model

Externally supplied call graph used as reachability evidence. Only node
identifiers and edge endpoints are read, everything else a tool emits is
accepted and ignored.

Two shapes are accepted:
    {"nodes": [{"name": ...}], "edges": [{"from": ..., "to": ...}]}
    {"functions": [{"id": ...}], "calls": [{"source": ..., "target": ...}]}
"""

from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def convert_identifier_to_str(v: Any) -> Any:
    """Some tools emit numeric node ids."""
    if v is None or isinstance(v, str):
        return v
    return str(v)


Identifier = Annotated[Optional[str], BeforeValidator(convert_identifier_to_str)]


class CallGraphNode(BaseModel):
    """Function or module in the call graph."""

    name: Identifier = None
    id: Identifier = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    @property
    def identifier(self) -> str:
        return self.name or self.id or ""


class CallGraphEdge(BaseModel):
    """Call relationship between two identifiers."""

    from_id: Identifier = Field(None, alias="from")
    source: Identifier = None
    to_id: Identifier = Field(None, alias="to")
    target: Identifier = None

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    @property
    def caller(self) -> str:
        return self.from_id or self.source or ""

    @property
    def callee(self) -> str:
        return self.to_id or self.target or ""


class CallGraph(BaseModel):
    nodes: List[CallGraphNode] = []
    edges: List[CallGraphEdge] = []

    model_config = ConfigDict(extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _accept_function_call_shape(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        nodes = data.get("nodes") or data.get("functions") or []
        edges = data.get("edges") or data.get("calls") or []
        return {
            "nodes": [{"name": n} if isinstance(n, str) else n for n in nodes],
            "edges": edges,
        }
