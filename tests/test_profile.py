from helpers import add_post


def test_follow_toggle(client, signed_in, other_user):
    profile, headers = signed_in
    other_profile, other_headers = other_user

    added = client.post(f"/profile/update-follower/{other_profile['id']}", headers=headers)
    assert added.status_code == 200
    assert added.json() == {"status": "added"}

    followers = client.get(f"/profile/followers/{other_profile['id']}", headers=headers).json()["followers"]
    assert [f["_id"] for f in followers] == [profile["id"]]
    followings = client.get(f"/profile/followings/{profile['id']}", headers=headers).json()["followings"]
    assert [f["name"] for f in followings] == ["Omar"]

    info = client.get(f"/profile/info/{other_profile['id']}", headers=headers).json()["profile"]
    assert info["followers"] == 1
    assert info["isFollowing"] is True
    assert "email" not in info

    removed = client.post(f"/profile/update-follower/{other_profile['id']}", headers=headers)
    assert removed.json() == {"status": "removed"}
    assert client.get(f"/profile/followers/{other_profile['id']}", headers=headers).json()["followers"] == []


def test_cannot_follow_self(client, signed_in):
    profile, headers = signed_in
    response = client.post(f"/profile/update-follower/{profile['id']}", headers=headers)
    assert response.status_code == 422
    assert response.json()["error"] == "Invalid request!"


def test_unknown_profile(client, signed_in):
    _, headers = signed_in
    response = client.get("/profile/info/64b7f0c2a1b2c3d4e5f60718", headers=headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Profile not found!"


def test_profile_posts(client, signed_in, other_user):
    profile, headers = signed_in
    _, other_headers = other_user
    add_post(client, headers)
    add_post(client, other_headers)

    posts = client.get(f"/profile/posts/{profile['id']}", headers=other_headers).json()["posts"]
    assert len(posts) == 1
    assert posts[0]["owner"]["_id"] == profile["id"]
