"""
carejourney/api/profile.py

Purpose: Public profiles and follow graph
"""

from fastapi import APIRouter

from carejourney.api.deps import AuthContext, CurrentAuth
from carejourney.services import post_service, user_service
from carejourney.utils.bson_utils import to_json_compatible
from carejourney.utils.validation_utils import parse_object_id

router = APIRouter()


@router.post("/update-follower/{profileId}")
async def update_follower(profileId: str, auth: AuthContext = CurrentAuth):
    """
    Follows the profile, or unfollows it when already followed.
    """
    profile_id = parse_object_id(profileId, "profileId")
    status = await user_service.toggle_follow(auth.user_id, profile_id)
    return {"status": status}


@router.get("/followers/{profileId}")
async def get_followers(profileId: str, auth: AuthContext = CurrentAuth):
    profile_id = parse_object_id(profileId, "profileId")
    followers = await user_service.list_follow_users(profile_id, "followers")
    return {"followers": followers}


@router.get("/followings/{profileId}")
async def get_followings(profileId: str, auth: AuthContext = CurrentAuth):
    profile_id = parse_object_id(profileId, "profileId")
    followings = await user_service.list_follow_users(profile_id, "followings")
    return {"followings": followings}


@router.get("/info/{profileId}")
async def get_public_profile(profileId: str, auth: AuthContext = CurrentAuth):
    profile_id = parse_object_id(profileId, "profileId")
    user = await user_service.require_user(profile_id, "Profile not found!")
    profile = user_service.format_public_profile(user)
    profile["isFollowing"] = auth.user_id in user.get("followers", [])
    return to_json_compatible({"profile": profile})


@router.get("/posts/{profileId}")
async def get_profile_posts(profileId: str, auth: AuthContext = CurrentAuth):
    profile_id = parse_object_id(profileId, "profileId")
    posts = await post_service.list_user_posts(profile_id)
    return to_json_compatible({"posts": posts})
