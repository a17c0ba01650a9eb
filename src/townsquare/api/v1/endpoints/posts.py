# src/townsquare/api/v1/endpoints/posts.py
"""Post-related read endpoints."""

from fastapi import APIRouter, HTTPException, status

from townsquare.api.v1.dependencies import SessionDep
from townsquare.repositories.post_repo import PostRepository
from townsquare.schemas.post import CommentNodeOut, CommentThreadOut
from townsquare.services.threads import build_thread

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/{post_id}/comments", response_model=CommentThreadOut)
async def get_comment_thread(post_id: int, db: SessionDep) -> CommentThreadOut:
    """Return a post's comments nested by reply."""
    repo = PostRepository(db)
    if repo.get_by_id(post_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    comments = repo.list_comments(post_id)
    usernames = repo.usernames(comment.author_user_id for comment in comments)
    return CommentThreadOut(
        post_id=post_id,
        comments=[CommentNodeOut.from_node(node, usernames) for node in build_thread(comments)],
    )
