from supabase import Client
from courtbook.config import settings
from courtbook.modules.comments.schemas import CommentResponse
from courtbook.modules.notifications.service import NotificationService
from courtbook.modules.sessions.service import SessionService
from courtbook.core.authorization import check_comment_author, check_comment_deleter
from courtbook.utils.datetime_utils import utcnow
from typing import Any, Dict, List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.sessions = SessionService(supabase)

    def _clean_content(self, content: str) -> str:
        content = (content or "").strip()
        if not content:
            raise HTTPException(status_code=400, detail="Comment cannot be empty")
        if len(content) > settings.comment_max_length:
            raise HTTPException(
                status_code=400,
                detail=f"Comment cannot exceed {settings.comment_max_length} characters"
            )
        return content

    def _get_comment(self, comment_id: str) -> Dict[str, Any]:
        result = self.supabase.table("session_comments")\
            .select("*")\
            .eq("id", comment_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Comment not found")
        return result.data[0]

    def _with_author(self, comment: Dict[str, Any]) -> CommentResponse:
        author = NotificationService(self.supabase).resolve_actor_name(comment.get("user_id"))
        return CommentResponse(**comment, author_name=author)

    def list_comments(self, session_id: str) -> List[CommentResponse]:
        """Comments of a session, oldest first"""
        self.sessions.get_session_row(session_id)
        try:
            result = self.supabase.table("session_comments")\
                .select("*")\
                .eq("session_id", session_id)\
                .order("created_at")\
                .execute()
            comments = result.data or []
            names: Dict[str, str] = {}
            if comments:
                profiles = self.supabase.table("profiles")\
                    .select("user_id, full_name, email")\
                    .in_("user_id", list({c["user_id"] for c in comments}))\
                    .execute()
                names = {
                    p["user_id"]: p.get("full_name") or p.get("email") or "Someone"
                    for p in (profiles.data or [])
                }
            return [CommentResponse(**c, author_name=names.get(c["user_id"], "Someone")) for c in comments]
        except Exception as e:
            logger.error(f"Error listing comments of session {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load comments")

    def create_comment(self, session_id: str, content: str, user_id: str) -> CommentResponse:
        content = self._clean_content(content)
        self.sessions.get_session_row(session_id)
        try:
            result = self.supabase.table("session_comments").insert({
                "session_id": session_id,
                "user_id": user_id,
                "content": content,
            }).execute()
        except Exception as e:
            logger.error(f"Error adding comment to session {session_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add comment")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to add comment")
        return self._with_author(result.data[0])

    def update_comment(self, comment_id: str, content: str, user_id: str) -> CommentResponse:
        content = self._clean_content(content)
        comment = self._get_comment(comment_id)
        check_comment_author(comment, user_id)
        try:
            result = self.supabase.table("session_comments")\
                .update({"content": content, "updated_at": utcnow().isoformat()})\
                .eq("id", comment_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error updating comment {comment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update comment")
        if not result.data:
            raise HTTPException(status_code=404, detail="Comment not found")
        return self._with_author(result.data[0])

    def delete_comment(self, comment_id: str, user_id: str) -> bool:
        comment = self._get_comment(comment_id)
        check_comment_deleter(self.supabase, comment, user_id)
        try:
            result = self.supabase.table("session_comments")\
                .delete()\
                .eq("id", comment_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting comment {comment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete comment")
        logger.info(f"Comment {comment_id} deleted by {user_id}")
        return len(result.data) > 0
