from fastapi import APIRouter, Depends
from courtbook.database.supabase_client import get_service_supabase
from courtbook.modules.comments.schemas import CommentCreate, CommentUpdate, CommentResponse
from courtbook.modules.comments.service import CommentService
from courtbook.core.dependencies import get_current_user, require_approved_user
from supabase import Client
from typing import List, Dict

router = APIRouter(tags=["comments"])


def get_comment_service(supabase: Client = Depends(get_service_supabase)) -> CommentService:
    return CommentService(supabase)


@router.get("/sessions/{session_id}/comments", response_model=List[CommentResponse])
async def list_comments(
    session_id: str,
    user_data: Dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service)
):
    return service.list_comments(session_id)


@router.post("/sessions/{session_id}/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    session_id: str,
    comment_data: CommentCreate,
    user_data: Dict = Depends(require_approved_user),
    service: CommentService = Depends(get_comment_service)
):
    return service.create_comment(session_id, comment_data.content, user_data["id"])


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: str,
    comment_data: CommentUpdate,
    user_data: Dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service)
):
    """Edit a comment (author only)"""
    return service.update_comment(comment_id, comment_data.content, user_data["id"])


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    user_data: Dict = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service)
):
    """Delete a comment (author, session organizer or admin)"""
    service.delete_comment(comment_id, user_data["id"])
    return None
