"""Community endpoints."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select

from townsquare.api.v1.dependencies import SessionDep
from townsquare.models import Community, ModAction, User
from townsquare.schemas.moderation import ModActionOut, ModLogOut

router = APIRouter(prefix="/communities", tags=["communities"])


@router.get("/{community_id}/modlog", response_model=ModLogOut)
async def get_modlog(
    community_id: int,
    db: SessionDep,
    limit: int = Query(20, ge=1, le=100),
) -> ModLogOut:
    """Public moderation log of a community, newest first."""
    if db.get(Community, community_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Community not found")

    rows = db.execute(
        select(ModAction, User.username)
        .outerjoin(User, User.id == ModAction.actor_user_id)
        .where(ModAction.community_id == community_id, ModAction.is_public.is_(True))
        .order_by(ModAction.created_at.desc(), ModAction.id.desc())
        .limit(limit)
    )
    return ModLogOut(
        actions=[
            ModActionOut(
                id=action.id,
                action=action.action,
                target_type=action.target_type,
                target_id=action.target_id,
                reason=action.reason,
                actor=username,
                created_at=action.created_at,
            )
            for action, username in rows
        ]
    )
