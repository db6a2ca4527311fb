"""
Comment endpoints.
"""

from fastapi import APIRouter, HTTPException, status

from api.deps import CurrentPrincipal, Engine
from schemas.comment import CommentCreate, CommentCreated
from schemas.governance import Comment

router = APIRouter()


@router.post(
    "/{vision_id}/comments",
    response_model=CommentCreated,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    vision_id: int,
    data: CommentCreate,
    principal: CurrentPrincipal,
    engine: Engine,
) -> CommentCreated:
    comment = await engine.add_comment(
        principal,
        vision_id,
        data.content,
        parent_comment_id=data.parent_comment_id,
    )
    return CommentCreated(comment_id=comment.comment_id)


@router.get("/{vision_id}/comments/{comment_id}", response_model=Comment)
async def get_comment(vision_id: int, comment_id: int, engine: Engine) -> Comment:
    comment = await engine.get_comment(vision_id, comment_id)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment
