from helpers import add_post

REPORT = "This post contains misleading medical advice"


def test_report_post(client, signed_in, other_user):
    _, headers = signed_in
    _, other_headers = other_user
    post = add_post(client, headers)

    response = client.post("/post-report/add-post-report", headers=other_headers, json={
        "postId": post["_id"], "description": REPORT,
    })
    assert response.status_code == 201
    assert response.json() == {"success": True}


def test_report_description_too_short(client, signed_in):
    _, headers = signed_in
    post = add_post(client, headers)
    response = client.post("/post-report/add-post-report", headers=headers, json={
        "postId": post["_id"], "description": "  spam   ",
    })
    assert response.status_code == 422
    assert response.json()["error"] == "Report description must be at least 15 characters!"


def test_report_requires_valid_post(client, signed_in):
    _, headers = signed_in
    invalid = client.post("/post-report/add-post-report", headers=headers, json={
        "postId": "123", "description": REPORT,
    })
    assert invalid.status_code == 422
    assert invalid.json()["error"] == "Invalid postId!"

    missing = client.post("/post-report/add-post-report", headers=headers, json={
        "postId": "64b7f0c2a1b2c3d4e5f60718", "description": REPORT,
    })
    assert missing.status_code == 404


def test_report_reply(client, signed_in, other_user):
    _, headers = signed_in
    _, other_headers = other_user
    post = add_post(client, headers)
    reply = client.post(
        f"/post/add-reply?postId={post['_id']}",
        headers=other_headers,
        json={"description": "Buy my miracle cure"}
    ).json()["reply"]

    response = client.post("/reply-report/add-reply-report", headers=headers, json={
        "postId": post["_id"], "replyId": reply["_id"], "description": REPORT,
    })
    assert response.status_code == 201

    unknown = client.post("/reply-report/add-reply-report", headers=headers, json={
        "postId": post["_id"], "replyId": "64b7f0c2a1b2c3d4e5f60718", "description": REPORT,
    })
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "Reply not found!"


def test_report_requires_auth(client):
    response = client.post("/post-report/add-post-report", json={
        "postId": "64b7f0c2a1b2c3d4e5f60718", "description": REPORT,
    })
    assert response.status_code == 403
