"""Comment thread schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from townsquare.schemas.common import CamelModel
from townsquare.services.threads import ThreadNode


class CommentNodeOut(CamelModel):
    """A comment with its replies nested beneath it."""

    id: int
    parent_id: int | None
    author_id: int
    author: str
    body: str
    created_at: datetime
    children: list[CommentNodeOut] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: ThreadNode, usernames: dict[int, str]) -> CommentNodeOut:
        comment = node.comment
        return cls(
            id=comment.id,
            parent_id=comment.parent_id,
            author_id=comment.author_user_id,
            author=usernames.get(comment.author_user_id, ""),
            body=comment.body,
            created_at=comment.created_at,
            children=[cls.from_node(child, usernames) for child in node.children],
        )


class CommentThreadOut(CamelModel):
    post_id: int
    comments: list[CommentNodeOut]


CommentNodeOut.model_rebuild()
