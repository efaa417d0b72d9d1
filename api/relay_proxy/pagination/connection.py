"""Connection, edge and page models for cursor-based pagination."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PagedResult(BaseModel):
    """One upstream page: its items and whether another page exists."""

    items: List[Any] = Field(default_factory=list, description="Items of the page in upstream order")
    has_next_page: bool = Field(description="Whether the upstream reports a further page")


class Edge(BaseModel):
    """An item paired with the cursor that reproduces its position."""

    node: Any = Field(description="The item")
    cursor: str = Field(description="Opaque cursor of the item")


class PageInfo(BaseModel):
    """Information about pagination in a connection."""

    start_cursor: Optional[str] = Field(default=None, description="Cursor of the first edge")
    end_cursor: Optional[str] = Field(default=None, description="Cursor of the last edge")
    has_previous_page: bool = Field(default=False, description="Always false, pagination is forward only")
    has_next_page: bool = Field(default=False, description="Whether more items exist after the last edge")


class Connection(BaseModel):
    """A connection to a list of items."""

    edges: List[Edge] = Field(default_factory=list, description="Edges in upstream order")
    page_info: PageInfo = Field(default_factory=PageInfo, description="Pagination metadata")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "edges": [
                    {
                        "node": {"url": "https://www.anapioficeandfire.com/api/books/1", "name": "A Game of Thrones"},
                        "cursor": "cGFnZT0wO29mZnNldD0w"
                    }
                ],
                "page_info": {
                    "start_cursor": "cGFnZT0wO29mZnNldD0w",
                    "end_cursor": "cGFnZT0wO29mZnNldD0w",
                    "has_previous_page": False,
                    "has_next_page": True
                }
            }
        }
    )

    @property
    def nodes(self) -> List[Any]:
        return [edge.node for edge in self.edges]


def empty_connection() -> Connection:
    """The canonical empty connection: no edges, null cursors, no pages."""
    return Connection(edges=[], page_info=PageInfo())
