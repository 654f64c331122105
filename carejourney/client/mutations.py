"""
carejourney/client/mutations.py

Purpose: Write operations used by the app screens, with cache effects

- FileMutations: delete / update journal files
- ScheduleMutations: delete / update appointments and medications
- PostMutations: delete / update / favorite posts
- FollowMutations: follow toggle
- ReplyMutations: delete / favorite replies (optimistic, with rollback)

Every mutation talks to the API through get_client(), updates the
QueryCache and reports the outcome through the Notifier.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel

from carejourney.client.api_client import catch_async_error, get_client
from carejourney.client.notifications import Notifier
from carejourney.client.query_cache import Mutation, QueryCache
from carejourney.utils.time_utils import utcnow

ClientFactory = Callable[..., Any]


# ---------------------------------------------------------------------------
# Query keys
# ---------------------------------------------------------------------------

def folder_files_key(folder_name: str):
    return ("folder-files", folder_name)


FOLDERS_LENGTH_KEY = ("folders-length",)


def schedules_key(schedule_name: str):
    return ("schedules", schedule_name)


def posts_key(cancer_type: str):
    return ("posts", cancer_type)


def profile_posts_key(user_id: str):
    return ("profile-posts", user_id)


def followers_key(profile_id: str):
    return ("followers", profile_id)


def followings_key(profile_id: str):
    return ("followings", profile_id)


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

class UserProfile(BaseModel):
    id: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    userType: Optional[str] = None


class DeleteFileParams(BaseModel):
    fileId: str
    folderName: str
    on_close: Optional[Callable[[], Any]] = None


class UpdateFileParams(DeleteFileParams):
    title: str
    description: str = ""


class DeleteScheduleParams(BaseModel):
    scheduleId: str
    scheduleName: str
    on_close: Optional[Callable[[], Any]] = None


class UpdateScheduleParams(DeleteScheduleParams):
    # appointment fields
    title: Optional[str] = None
    location: Optional[str] = None
    date: Optional[datetime] = None
    reminder: Optional[str] = None
    # medication fields
    name: Optional[str] = None
    frequency: Optional[str] = None
    timesPerDay: Optional[str] = None
    specificDays: Optional[List[str]] = None
    prescriber: Optional[str] = None
    # shared
    notes: Optional[str] = None

    def update_fields(self) -> Dict[str, Any]:
        return self.model_dump(
            mode="json",
            exclude_none=True,
            exclude={"scheduleId", "scheduleName", "on_close"}
        )


class DeletePostParams(BaseModel):
    postId: str
    ownerId: str
    cancerType: str
    on_close: Optional[Callable[[], Any]] = None


class ImageUpload(BaseModel):
    filename: str
    content: bytes
    content_type: str


class UpdatePostParams(BaseModel):
    postId: str
    ownerId: str
    cancerType: str
    description: str
    forumType: str
    image: Optional[ImageUpload] = None
    reset_fields: Optional[Callable[[], Any]] = None


class FavoritePostParams(BaseModel):
    postId: str
    profile: Optional[UserProfile] = None
    cancerType: str
    publicProfile: bool = False
    publicUserId: str = ""


class UpdateFollowParams(BaseModel):
    profileId: str
    currentUser: Optional[UserProfile] = None


class DeleteReplyParams(BaseModel):
    postId: str
    replyId: str
    cancerType: str
    publicProfile: bool = False
    publicUserId: str = ""
    on_close: Optional[Callable[[], Any]] = None
    on_delete_reply: Optional[Callable[[str], Any]] = None


class FavoriteReplyParams(BaseModel):
    postId: str
    reply: Dict[str, Any]
    profile: Optional[UserProfile] = None
    cancerType: str
    publicProfile: bool = False
    publicUserId: str = ""
    on_favorite_reply: Optional[Callable[[Dict[str, Any], Optional[UserProfile]], Any]] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _close(callback: Optional[Callable]) -> None:
    if callback is not None:
        callback()


def _posts_query_key(cancer_type: str, public_profile: bool, public_user_id: str):
    return profile_posts_key(public_user_id) if public_profile else posts_key(cancer_type)


def _new_like(profile: UserProfile) -> Dict[str, Any]:
    return {
        "_id": str(ObjectId()),
        "userId": {
            "_id": profile.id,
            "avatar": {"url": profile.avatar or "", "publicId": ""},
            "name": profile.name,
            "userType": profile.userType,
        },
        "createdAt": utcnow().isoformat(),
    }


def toggle_like(likes: List[Dict[str, Any]], profile: UserProfile) -> List[Dict[str, Any]]:
    """Remove the profile's like if present, otherwise append one."""
    liked = any(str(like.get("userId", {}).get("_id")) == profile.id for like in likes)
    if liked:
        return [like for like in likes if str(like.get("userId", {}).get("_id")) != profile.id]
    return likes + [_new_like(profile)]


class _Mutations:
    """Shared plumbing: cache, notifier and an API client factory."""

    def __init__(
        self,
        cache: QueryCache,
        notifier: Optional[Notifier] = None,
        client_factory: ClientFactory = get_client
    ):
        self.cache = cache
        self.notifier = notifier or Notifier()
        self.client_factory = client_factory

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        client = await self.client_factory()
        async with client:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json() if response.content else None

    def _report_error(self, error: BaseException, *_) -> None:
        self.notifier.error(catch_async_error(error))


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

class FileMutations(_Mutations):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.delete_file = Mutation(
            mutation_fn=self._delete,
            on_success=self._on_deleted,
            on_error=self._report_error,
            on_settled=lambda data, error, variables, context: _close(variables.on_close),
        )
        self.update_file = Mutation(
            mutation_fn=self._update,
            on_success=self._on_updated,
            on_error=self._report_error,
            on_settled=lambda data, error, variables, context: _close(variables.on_close),
        )

    async def _delete(self, params: DeleteFileParams):
        return await self._request(
            "DELETE", "/file/file-delete",
            params={"fileId": params.fileId, "folderName": params.folderName}
        )

    def _on_deleted(self, data, params: DeleteFileParams, context) -> None:
        self.cache.set_query_data(
            folder_files_key(params.folderName),
            lambda old: [f for f in (old or []) if f.get("_id") != params.fileId]
        )
        self.cache.invalidate_queries(FOLDERS_LENGTH_KEY)
        self.notifier.notify("File deleted successfully")

    async def _update(self, params: UpdateFileParams):
        return await self._request(
            "PATCH", "/file/file-update",
            params={"fileId": params.fileId, "folderName": params.folderName},
            json={"title": params.title, "description": params.description}
        )

    def _on_updated(self, data, params: UpdateFileParams, context) -> None:
        def merge(old):
            return [
                dict(f, title=params.title, description=params.description) if f.get("_id") == params.fileId else f
                for f in (old or [])
            ]

        self.cache.set_query_data(folder_files_key(params.folderName), merge)
        self.notifier.notify("File updated successfully")


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

def _singular(schedule_name: str) -> str:
    return schedule_name[:-1] if schedule_name.endswith("s") else schedule_name


class ScheduleMutations(_Mutations):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.delete_schedule = Mutation(
            mutation_fn=self._delete,
            on_success=self._on_deleted,
            on_error=self._on_error,
        )
        self.update_schedule = Mutation(
            mutation_fn=self._update,
            on_success=self._on_updated,
            on_error=self._on_error,
        )

    async def _delete(self, params: DeleteScheduleParams):
        return await self._request(
            "DELETE", "/schedule/schedule-delete",
            params={"scheduleId": params.scheduleId, "scheduleName": params.scheduleName}
        )

    def _on_deleted(self, data, params: DeleteScheduleParams, context) -> None:
        self.cache.set_query_data(
            schedules_key(params.scheduleName),
            lambda old: [s for s in (old or []) if str(s.get("_id")) != params.scheduleId]
        )
        _close(params.on_close)
        self.notifier.notify(f"{_singular(params.scheduleName).capitalize()} deleted successfully")

    async def _update(self, params: UpdateScheduleParams):
        return await self._request(
            "PATCH", f"/schedule/{_singular(params.scheduleName)}-update",
            params={"scheduleId": params.scheduleId, "scheduleName": params.scheduleName},
            json=params.update_fields()
        )

    def _on_updated(self, data, params: UpdateScheduleParams, context) -> None:
        fields = params.update_fields()

        def merge(old):
            return [
                dict(s, **fields) if str(s.get("_id")) == params.scheduleId else s
                for s in (old or [])
            ]

        self.cache.set_query_data(schedules_key(params.scheduleName), merge)
        _close(params.on_close)
        self.notifier.notify(f"{_singular(params.scheduleName).capitalize()} updated successfully")

    def _on_error(self, error, params, context) -> None:
        _close(params.on_close)
        self._report_error(error)


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------

class PostMutations(_Mutations):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.delete_post = Mutation(
            mutation_fn=self._delete,
            on_success=self._on_deleted,
            on_error=self._on_delete_error,
        )
        self.update_post = Mutation(
            mutation_fn=self._update,
            on_success=self._on_updated,
            on_error=self._report_error,
        )
        self.favorite_post = Mutation(
            mutation_fn=self._favorite,
            on_success=self._on_favorited,
            on_error=self._report_error,
        )

    async def _delete(self, params: DeletePostParams):
        return await self._request(
            "DELETE", "/post/post-delete",
            params={"postId": params.postId, "ownerId": params.ownerId}
        )

    def _on_deleted(self, data, params: DeletePostParams, context) -> None:
        self.cache.set_query_data(
            posts_key(params.cancerType),
            lambda old: [p for p in (old or []) if str(p.get("_id")) != params.postId]
        )
        _close(params.on_close)
        self.notifier.notify("Your post has been deleted successfully")

    def _on_delete_error(self, error, params: DeletePostParams, context) -> None:
        _close(params.on_close)
        self._report_error(error)

    async def _update(self, params: UpdatePostParams):
        files = None
        if params.image:
            files = {"image": (params.image.filename, params.image.content, params.image.content_type)}
        return await self._request(
            "PATCH", "/post/",
            params={"postId": params.postId, "ownerId": params.ownerId},
            data={"description": params.description, "forumType": params.forumType},
            files=files
        )

    def _on_updated(self, data, params: UpdatePostParams, context) -> None:
        image = (data or {}).get("post", {}).get("image") if isinstance(data, dict) else None

        def merge(old):
            return [
                dict(p, description=params.description, forumType=params.forumType, image=image)
                if str(p.get("_id")) == params.postId else p
                for p in (old or [])
            ]

        self.cache.set_query_data(posts_key(params.cancerType), merge)
        _close(params.reset_fields)

    async def _favorite(self, params: FavoritePostParams):
        if not params.postId or not params.profile:
            return None
        return await self._request("POST", "/post/update-post-favorite", params={"postId": params.postId})

    def _on_favorited(self, data, params: FavoritePostParams, context) -> None:
        if not params.profile:
            return

        def toggle(old):
            return [
                dict(p, likes=toggle_like(p.get("likes", []), params.profile))
                if str(p.get("_id")) == params.postId else p
                for p in (old or [])
            ]

        self.cache.set_query_data(
            _posts_query_key(params.cancerType, params.publicProfile, params.publicUserId),
            toggle
        )


# ---------------------------------------------------------------------------
# Follow
# ---------------------------------------------------------------------------

class FollowMutations(_Mutations):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.update_follow = Mutation(
            mutation_fn=self._update,
            on_mutate=self._cancel_refetches,
            on_error=self._report_error,
            on_settled=self._refresh,
        )

    async def _update(self, params: UpdateFollowParams):
        return await self._request("POST", f"/profile/update-follower/{params.profileId}")

    async def _cancel_refetches(self, params: UpdateFollowParams) -> None:
        if not params.profileId:
            return
        await self.cache.cancel_queries(followers_key(params.profileId))
        await self.cache.cancel_queries(followings_key(params.profileId))

    def _refresh(self, data, error, params: UpdateFollowParams, context) -> None:
        self.cache.invalidate_queries(followers_key(params.profileId))
        if params.currentUser:
            self.cache.invalidate_queries(followings_key(params.currentUser.id))


# ---------------------------------------------------------------------------
# Replies
# ---------------------------------------------------------------------------

class ReplyMutations(_Mutations):

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.delete_reply = Mutation(
            mutation_fn=self._delete,
            on_success=self._on_deleted,
            on_error=self._on_delete_error,
            on_settled=self._refresh,
        )
        self.favorite_reply = Mutation(
            mutation_fn=self._favorite,
            on_mutate=self._optimistic_favorite,
            on_success=self._on_favorited,
            on_error=self._rollback_favorite,
            on_settled=self._refresh,
        )

    def _refresh(self, data, error, params, context) -> None:
        self.cache.invalidate_queries(posts_key(params.cancerType))
        self.cache.invalidate_queries(profile_posts_key(params.publicUserId))

    async def _delete(self, params: DeleteReplyParams):
        return await self._request(
            "DELETE", "/post/reply-delete",
            params={"postId": params.postId, "replyId": params.replyId}
        )

    def _on_deleted(self, data, params: DeleteReplyParams, context) -> None:
        def drop(old):
            return [
                dict(p, replies=[r for r in p.get("replies", []) if str(r.get("_id")) != params.replyId])
                if str(p.get("_id")) == params.postId else p
                for p in (old or [])
            ]

        self.cache.set_query_data(
            _posts_query_key(params.cancerType, params.publicProfile, params.publicUserId),
            drop
        )
        if params.on_delete_reply:
            params.on_delete_reply(params.replyId)
        _close(params.on_close)
        self.notifier.notify("Your reply has been deleted successfully")

    def _on_delete_error(self, error, params: DeleteReplyParams, context) -> None:
        _close(params.on_close)
        self._report_error(error)

    async def _favorite(self, params: FavoriteReplyParams):
        reply_id = params.reply.get("_id")
        if not params.postId or not reply_id:
            return None
        return await self._request(
            "POST", "/post/update-reply-favorite",
            params={"postId": params.postId, "replyId": str(reply_id)}
        )

    async def _optimistic_favorite(self, params: FavoriteReplyParams) -> Optional[Dict[str, Any]]:
        """Toggle the like in the cache right away and return a snapshot for rollback."""
        reply_id = params.reply.get("_id")
        if not reply_id:
            return None

        await self.cache.cancel_queries(posts_key(params.cancerType))
        await self.cache.cancel_queries(profile_posts_key(params.publicUserId))

        query_key = _posts_query_key(params.cancerType, params.publicProfile, params.publicUserId)
        previous_posts = self.cache.get_query_data(query_key)

        if previous_posts and params.profile:
            def toggle_reply(reply):
                if str(reply.get("_id")) != str(reply_id):
                    return reply
                return dict(reply, likes=toggle_like(reply.get("likes", []), params.profile))

            self.cache.set_query_data(query_key, [
                dict(p, replies=[toggle_reply(r) for r in p.get("replies", [])])
                if str(p.get("_id")) == params.postId else p
                for p in previous_posts
            ])

        return {"query_key": query_key, "previous_posts": previous_posts}

    def _on_favorited(self, data, params: FavoriteReplyParams, context) -> None:
        if params.on_favorite_reply:
            params.on_favorite_reply(params.reply, params.profile)

    def _rollback_favorite(self, error, params: FavoriteReplyParams, context) -> None:
        if context and context.get("previous_posts") is not None:
            self.cache.set_query_data(context["query_key"], context["previous_posts"])
        self._report_error(error)


__all__ = [
    "FileMutations",
    "ScheduleMutations",
    "PostMutations",
    "FollowMutations",
    "ReplyMutations",
]
