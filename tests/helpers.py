PASSWORD = "Passw0rd!"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def sign_up(client, name="Jane", email="jane@example.com", password=PASSWORD):
    response = client.post("/auth/create", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["user"]


def sign_in(client, email="jane@example.com", password=PASSWORD):
    response = client.post("/auth/sign-in", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def png_file(name="photo.png", content=PNG_BYTES, content_type="image/png"):
    return (name, content, content_type)


DESCRIPTION = "Finished my second round of chemo today"


def add_post(client, headers, description=DESCRIPTION, forum="breast", image=None):
    files = {"image": image} if image else None
    response = client.post(
        "/post/add-post",
        headers=headers,
        data={"description": description, "forumType": forum},
        files=files
    )
    assert response.status_code == 201, response.text
    return response.json()["post"]
