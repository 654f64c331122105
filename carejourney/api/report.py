"""
carejourney/api/report.py

Purpose: Report endpoints for posts and replies

Two routers, mounted at /post-report and /reply-report.
"""

from fastapi import APIRouter

from carejourney.api.deps import AuthContext, CurrentAuth
from carejourney.schemas.report import PostReportRequest, ReplyReportRequest
from carejourney.services import report_service
from carejourney.utils.validation_utils import parse_object_id

post_report_router = APIRouter()
reply_report_router = APIRouter()


@post_report_router.post("/add-post-report", status_code=201)
async def add_post_report(body: PostReportRequest, auth: AuthContext = CurrentAuth):
    await report_service.add_post_report(
        auth.user_id,
        parse_object_id(body.postId, "postId"),
        body.description
    )
    return {"success": True}


@reply_report_router.post("/add-reply-report", status_code=201)
async def add_reply_report(body: ReplyReportRequest, auth: AuthContext = CurrentAuth):
    await report_service.add_reply_report(
        auth.user_id,
        parse_object_id(body.postId, "postId"),
        parse_object_id(body.replyId, "replyId"),
        body.description
    )
    return {"success": True}
