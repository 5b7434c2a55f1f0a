"""Tests for user listing and profile endpoints."""

from conftest import client


def test_list_users_members_only():
    r = client.get("/users")
    assert r.status_code == 200
    data = r.json()["data"]
    # Lurker has no posts, user 6 has no name, user 0 is a guest
    assert [u["name"] for u in data["users"]] == ["Aragorn", "Belén", "Chloé", "Dieter"]
    assert data["pagination"]["total"] == 4
    assert data["pagination"]["limit"] == 50
    assert data["search"] is None


def test_list_users_counts():
    top = client.get("/users").json()["data"]["users"][0]
    assert top["postCount"] == 46
    assert top["threadCount"] == 46
    assert top["firstPost"] == "Jan 2, 2007 at 10:00 AM"
    assert top["lastPost"] == "Feb 15, 2007 at 10:00 AM"


def test_list_users_search_ignores_case():
    data = client.get("/users?search=BELÉN").json()["data"]
    assert [u["id"] for u in data["users"]] == [2]
    assert data["pagination"]["total"] == 1
    assert data["search"] == "BELÉN"


def test_list_users_blank_search():
    data = client.get("/users?search=%20%20").json()["data"]
    assert data["search"] is None
    assert data["pagination"]["total"] == 4


def test_list_users_paginated():
    data = client.get("/users?page=2&limit=3").json()["data"]
    assert [u["name"] for u in data["users"]] == ["Dieter"]
    assert data["pagination"]["totalPages"] == 2
    assert data["pagination"]["hasNext"] is False


def test_get_user():
    r = client.get("/users/1")
    assert r.status_code == 200
    u = r.json()["data"]
    assert u["name"] == "Aragorn"
    assert u["postCount"] == 46
    assert u["threadCount"] == 46


def test_get_user_without_posts():
    u = client.get("/users/5").json()["data"]
    assert u["name"] == "Lurker"
    assert u["postCount"] == 0
    assert u["threadCount"] == 0
    assert u["firstPost"] is None
    assert u["lastPost"] is None


def test_get_user_not_found():
    r = client.get("/users/999")
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"


def test_get_user_invalid_id():
    r = client.get("/users/abc")
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid user ID"
    assert client.get("/users/0").status_code == 400


HUGE = "99999999999999999999"


def test_get_user_id_beyond_integer_range():
    r = client.get(f"/users/{HUGE}")
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"
    assert client.get(f"/users/{HUGE}/threads").status_code == 404


def test_user_posts_huge_page():
    r = client.get(f"/users/1/posts?page={HUGE}")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["posts"] == []
    assert data["pagination"]["total"] == 46


def test_list_users_huge_page():
    r = client.get(f"/users?page={HUGE}")
    assert r.status_code == 200
    assert r.json()["data"]["users"] == []


def test_user_posts_newest_first():
    data = client.get("/users/1/posts?limit=5").json()["data"]
    assert [p["id"] for p in data["posts"]] == [45, 44, 43, 42, 41]
    assert data["posts"][0]["threadName"] == "English thread 45"
    assert data["user"]["name"] == "Aragorn"
    p = data["pagination"]
    assert (p["total"], p["totalPages"]) == (46, 10)


def test_user_posts_undated_last():
    data = client.get("/users/1/posts?page=10&limit=5").json()["data"]
    assert [p["id"] for p in data["posts"]] == [51]


def test_user_posts_not_found():
    assert client.get("/users/999/posts").status_code == 404


def test_user_threads():
    data = client.get("/users/4/threads").json()["data"]
    assert len(data["threads"]) == 1
    t = data["threads"][0]
    assert t["id"] == 47
    assert t["postCount"] == 2
    assert t["createdTime"] == "Feb 2, 2019 at 11:00 AM"
    assert t["lastPostTime"] == "Feb 3, 2019 at 11:30 AM"
    assert data["pagination"]["total"] == 1


def test_user_threads_by_first_post():
    data = client.get("/users/1/threads?limit=5").json()["data"]
    assert [t["id"] for t in data["threads"]] == [45, 44, 43, 42, 41]
    assert data["pagination"]["totalPages"] == 10


def test_user_threads_empty():
    data = client.get("/users/5/threads").json()["data"]
    assert data["threads"] == []
    assert data["pagination"]["total"] == 0
