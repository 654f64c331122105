from helpers import png_file


def upload(client, headers, folder="Scans", title="MRI", description="", file=None):
    return client.post(
        "/file/upload-file",
        headers=headers,
        data={"folderName": folder, "title": title, "description": description},
        files={"file": file or png_file()},
    )


def test_upload_and_list_folder(client, signed_in):
    profile, headers = signed_in
    response = upload(client, headers, description="Left knee")
    assert response.status_code == 201
    stored = response.json()["file"]
    assert stored["folderName"] == "Scans"
    assert stored["file"]["publicId"].startswith(f"{profile['id']}/file-")

    files = client.get("/file/folder-files?folderName=Scans", headers=headers).json()["files"]
    assert [f["_id"] for f in files] == [stored["_id"]]


def test_folders_length(client, signed_in):
    _, headers = signed_in
    upload(client, headers, folder="Scans")
    upload(client, headers, folder="Scans", title="CT")
    upload(client, headers, folder="Prescriptions", title="Tamoxifen")

    response = client.get("/file/folders-length", headers=headers)
    assert response.status_code == 200
    assert response.json()["folders"] == {"Scans": 2, "Prescriptions": 1}


def test_upload_requires_title(client, signed_in, storage):
    _, headers = signed_in
    response = upload(client, headers, title=" ")
    assert response.status_code == 422
    assert response.json()["error"] == "Title is required!"
    storage.upload_image.assert_not_awaited()


def test_upload_rejects_long_folder_name(client, signed_in):
    _, headers = signed_in
    response = upload(client, headers, folder="x" * 31)
    assert response.status_code == 422
    assert response.json()["error"] == "Invalid folder name!"


def test_update_file(client, signed_in):
    _, headers = signed_in
    stored = upload(client, headers).json()["file"]

    response = client.patch(
        f"/file/file-update?fileId={stored['_id']}&folderName=Scans",
        headers=headers,
        json={"title": "MRI (March)"}
    )
    assert response.status_code == 200
    assert response.json()["file"]["title"] == "MRI (March)"

    wrong_folder = client.patch(
        f"/file/file-update?fileId={stored['_id']}&folderName=Other",
        headers=headers,
        json={"title": "MRI"}
    )
    assert wrong_folder.status_code == 404


def test_delete_file(client, signed_in, other_user, storage):
    _, headers = signed_in
    _, other_headers = other_user
    stored = upload(client, headers).json()["file"]
    url = f"/file/file-delete?fileId={stored['_id']}&folderName=Scans"

    assert client.delete(url, headers=other_headers).status_code == 404

    assert client.delete(url, headers=headers).status_code == 200
    storage.delete_object.assert_awaited_once_with(stored["file"]["publicId"])
    assert client.get("/file/folder-files?folderName=Scans", headers=headers).json()["files"] == []
