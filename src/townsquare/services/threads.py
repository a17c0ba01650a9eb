"""Rebuild nested comment threads from the flat comment table."""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field

from townsquare.models import Comment


@dataclass
class ThreadNode:
    comment: Comment
    children: list[ThreadNode] = field(default_factory=list)


def build_thread(comments: Sequence[Comment]) -> list[ThreadNode]:
    """Nest a post's comments under their parents.

    The input is the flat list in display order; sibling order is preserved.
    A comment whose parent is missing from the list (deleted, or from another
    post) is shown at the top level instead of being dropped.
    """
    nodes = {comment.id: ThreadNode(comment) for comment in comments}
    children_of: dict[int | None, list[ThreadNode]] = defaultdict(list)
    for comment in comments:
        parent = comment.parent_id if comment.parent_id in nodes else None
        children_of[parent].append(nodes[comment.id])

    # Walk from the roots so that a malformed parent cycle can't loop forever.
    roots = children_of[None]
    stack = list(roots)
    seen: set[int] = set()
    while stack:
        node = stack.pop()
        if node.comment.id in seen:
            continue
        seen.add(node.comment.id)
        node.children = children_of.get(node.comment.id, [])
        stack.extend(node.children)
    return roots
