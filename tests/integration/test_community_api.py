from roomezes.community import repository as community_repository

def test_like_toggles(client, monkeypatch):
    monkeypatch.setattr(community_repository, "toggle_like", lambda post_id, user_id: True)
    r = client.post("/api/v1/community", json={"action": "like", "postId": "p1"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "liked": True}

def test_comment_uses_display_name(client, monkeypatch):
    seen = {}

    def fake_add(post_id, user_id, user_name, comment):
        seen.update(post_id=post_id, user_id=user_id, user_name=user_name, comment=comment)
        return {"id": "c1", "comment": comment}

    monkeypatch.setattr(community_repository, "add_comment", fake_add)
    r = client.post("/api/v1/community", json={"action": "comment", "postId": "p1", "comment": "  Nice!  "})
    assert r.status_code == 200
    assert r.json()["data"] == {"id": "c1", "comment": "Nice!"}
    assert seen["user_name"] == "Test User"
    assert seen["user_id"] == "test-user"

def test_blank_comment_is_400(client):
    r = client.post("/api/v1/community", json={"action": "comment", "postId": "p1", "comment": "   "})
    assert r.status_code == 400

def test_invalid_action_is_400(client):
    r = client.post("/api/v1/community", json={"action": "share", "postId": "p1"})
    assert r.status_code == 400
    assert r.json() == {"detail": "Invalid action"}

def test_repository_error_is_500(client, monkeypatch):
    def broken(*a):
        raise RuntimeError("db down")

    monkeypatch.setattr(community_repository, "toggle_like", broken)
    r = client.post("/api/v1/community", json={"action": "like", "postId": "p1"})
    assert r.status_code == 500

def test_stats_require_post_id(client):
    r = client.get("/api/v1/community")
    assert r.status_code == 400
    assert r.json() == {"detail": "Post ID required"}

def test_stats(client, monkeypatch):
    monkeypatch.setattr(community_repository, "count_likes", lambda post_id: 3)
    monkeypatch.setattr(community_repository, "list_comments", lambda post_id: [{"id": "c1"}])
    r = client.get("/api/v1/community", params={"postId": "p1"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "likes": 3, "comments": [{"id": "c1"}]}
