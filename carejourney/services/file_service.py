"""
carejourney/services/file_service.py

Purpose: Personal journal files

- Files grouped in named folders per user
- Folder counts, listing, title/description edits and deletes
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId

from carejourney.core.exceptions import ResourceNotFoundError
from carejourney.core.logging import get_logger
from carejourney.db.mongo import get_files_collection
from carejourney.services.storage_service import StorageService, discard_object
from carejourney.utils.constants import NEWEST_FIRST
from carejourney.utils.time_utils import utcnow

logger = get_logger(__name__)


async def add_file(
    owner_id: ObjectId,
    folder_name: str,
    title: str,
    description: str,
    stored: Dict[str, str]
) -> Dict[str, Any]:
    document = {
        "owner": owner_id,
        "folderName": folder_name,
        "title": title,
        "description": description,
        "file": stored,
        "createdAt": utcnow(),
    }
    result = await get_files_collection().insert_one(document)
    document["_id"] = result.inserted_id

    logger.info(
        f"File added to folder '{folder_name}'",
        extra={"user_id": str(owner_id), "file_id": str(document["_id"])}
    )
    return document


async def folders_length(owner_id: ObjectId) -> Dict[str, int]:
    """
    Number of files in each of the user's folders.
    """
    pipeline = [
        {"$match": {"owner": owner_id}},
        {"$group": {"_id": "$folderName", "count": {"$sum": 1}}},
    ]
    groups = await get_files_collection().aggregate(pipeline).to_list(length=None)
    return {group["_id"]: group["count"] for group in groups}


async def folder_files(owner_id: ObjectId, folder_name: str) -> List[Dict[str, Any]]:
    cursor = (
        get_files_collection()
        .find({"owner": owner_id, "folderName": folder_name})
        .sort(NEWEST_FIRST)
    )
    return await cursor.to_list(length=None)


async def require_file(owner_id: ObjectId, file_id: ObjectId, folder_name: str) -> Dict[str, Any]:
    document = await get_files_collection().find_one(
        {"_id": file_id, "owner": owner_id, "folderName": folder_name}
    )
    if not document:
        raise ResourceNotFoundError("File not found!")
    return document


async def update_file(
    owner_id: ObjectId,
    file_id: ObjectId,
    folder_name: str,
    title: Optional[str],
    description: Optional[str]
) -> Dict[str, Any]:
    document = await require_file(owner_id, file_id, folder_name)

    changes = {}
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description

    if changes:
        await get_files_collection().update_one({"_id": file_id}, {"$set": changes})
        document.update(changes)

    logger.info("File updated", extra={"file_id": str(file_id)})
    return document


async def delete_file(
    owner_id: ObjectId,
    file_id: ObjectId,
    folder_name: str,
    storage: StorageService
) -> None:
    document = await require_file(owner_id, file_id, folder_name)

    await get_files_collection().delete_one({"_id": file_id})
    await discard_object(storage, (document.get("file") or {}).get("publicId"))
    logger.info("File deleted", extra={"file_id": str(file_id)})
