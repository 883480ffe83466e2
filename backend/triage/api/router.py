"""
Router that serializes responses by field name.

Request models accept the camelCase aliases upstream parsers emit (cveId,
filePath, productionDependencies, ...). Responses always use the snake_case
field names of the result contract.
"""

from typing import Any

from fastapi import APIRouter
from fastapi.routing import APIRoute


class FieldNameRoute(APIRoute):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs["response_model_by_alias"] = False
        super().__init__(*args, **kwargs)


class CustomAPIRouter(APIRouter):
    """APIRouter whose routes never serialize responses by alias."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("route_class", FieldNameRoute)
        super().__init__(*args, **kwargs)
