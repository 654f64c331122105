"""
carejourney/api/file.py

Purpose: Personal journal file endpoints

- Upload an image into a named folder
- Folder counts and folder listing
- Edit title/description, delete (object included)
"""

from fastapi import APIRouter, File, Form, Query, UploadFile

from carejourney.api.deps import AuthContext, CurrentAuth, Storage
from carejourney.api.uploads import store_image
from carejourney.core.exceptions import ValidationError
from carejourney.schemas.file import FileUpdateRequest
from carejourney.services import file_service
from carejourney.services.storage_service import StorageService
from carejourney.utils.bson_utils import to_json_compatible
from carejourney.utils.constants import FOLDER_NAME_MAX_LENGTH, UPLOAD_KIND_FILE
from carejourney.utils.validation_utils import parse_object_id

router = APIRouter()


def check_folder_name(folder_name: str) -> str:
    folder_name = (folder_name or "").strip()
    if not folder_name or len(folder_name) > FOLDER_NAME_MAX_LENGTH:
        raise ValidationError("Invalid folder name!")
    return folder_name


@router.post("/upload-file", status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    folderName: str = Form(...),
    title: str = Form(""),
    description: str = Form(""),
    auth: AuthContext = CurrentAuth,
    storage: StorageService = Storage
):
    folder = check_folder_name(folderName)
    title = title.strip()
    if not title:
        raise ValidationError("Title is required!")

    stored = await store_image(file, auth.user_id, UPLOAD_KIND_FILE, storage)
    if not stored:
        raise ValidationError("File is missing!")

    document = await file_service.add_file(auth.user_id, folder, title, description.strip(), stored)
    return to_json_compatible({"success": True, "file": document})


@router.get("/folders-length")
async def folders_length(auth: AuthContext = CurrentAuth):
    return {"folders": await file_service.folders_length(auth.user_id)}


@router.get("/folder-files")
async def folder_files(folderName: str = Query(...), auth: AuthContext = CurrentAuth):
    folder = check_folder_name(folderName)
    files = await file_service.folder_files(auth.user_id, folder)
    return to_json_compatible({"files": files})


@router.patch("/file-update")
async def update_file(
    body: FileUpdateRequest,
    fileId: str = Query(...),
    folderName: str = Query(...),
    auth: AuthContext = CurrentAuth
):
    document = await file_service.update_file(
        auth.user_id,
        parse_object_id(fileId, "fileId"),
        check_folder_name(folderName),
        body.title,
        body.description
    )
    return to_json_compatible({"success": True, "file": document})


@router.delete("/file-delete")
async def delete_file(
    fileId: str = Query(...),
    folderName: str = Query(...),
    auth: AuthContext = CurrentAuth,
    storage: StorageService = Storage
):
    await file_service.delete_file(
        auth.user_id,
        parse_object_id(fileId, "fileId"),
        check_folder_name(folderName),
        storage
    )
    return {"success": True}
