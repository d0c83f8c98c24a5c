APPS = "/api/v1/applications"
TAGS = "/api/v1/tags"


def _create_application(client, **fields):
    payload = {"company_name": "Acme Corp", "job_title": "Backend Engineer", **fields}
    return client.post(APPS, json=payload).json()


class TestTagCrud:
    def test_create_and_list(self, client):
        r = client.post(TAGS, json={"name": "Remote", "color": "#00aa00"})
        assert r.status_code == 201
        assert r.json()["usage_count"] == 0
        client.post(TAGS, json={"name": "backend"})
        assert [t["name"] for t in client.get(TAGS).json()] == ["backend", "Remote"]

    def test_duplicate_name_case_insensitive(self, client):
        client.post(TAGS, json={"name": "Remote"})
        assert client.post(TAGS, json={"name": "remote"}).status_code == 409

    def test_blank_name(self, client):
        assert client.post(TAGS, json={"name": "   "}).status_code == 400
        assert client.post(TAGS, json={"name": ""}).status_code == 422

    def test_rename_and_recolor(self, client):
        tag = client.post(TAGS, json={"name": "remot"}).json()
        r = client.put(f"{TAGS}/{tag['id']}", json={"name": "remote", "color": "#123456"})
        assert r.status_code == 200
        assert r.json()["name"] == "remote"
        assert r.json()["color"] == "#123456"

    def test_rename_clash(self, client):
        client.post(TAGS, json={"name": "remote"})
        tag = client.post(TAGS, json={"name": "onsite"}).json()
        assert client.put(f"{TAGS}/{tag['id']}", json={"name": "REMOTE"}).status_code == 409

    def test_delete_detaches_from_applications(self, client):
        app = _create_application(client, tags=["remote"])
        tag = client.get(TAGS).json()[0]
        assert tag["usage_count"] == 1
        assert client.delete(f"{TAGS}/{tag['id']}").status_code == 200
        assert client.get(f"{APPS}/{app['id']}").json()["tags"] == []

    def test_rename_to_blank_rejected(self, client):
        tag = client.post(TAGS, json={"name": "remote"}).json()
        r = client.put(f"{TAGS}/{tag['id']}", json={"name": "   "})
        assert r.status_code == 400
        assert client.get(TAGS).json()[0]["name"] == "remote"

    def test_non_ascii_names_match_case_insensitively(self, client):
        client.post(TAGS, json={"name": "Énergie"})
        assert client.post(TAGS, json={"name": "énergie"}).status_code == 409
        assert client.post(TAGS, json={"name": "ÉNERGIE"}).status_code == 409

    def test_duplicate_caught_at_commit_is_conflict(self, client, monkeypatch):
        monkeypatch.setattr("jobtracker.routers.tags.check_name_free", lambda db, name, tag_id=None: None)
        client.post(TAGS, json={"name": "remote"})
        assert client.post(TAGS, json={"name": "Remote"}).status_code == 409
        assert len(client.get(TAGS).json()) == 1

    def test_missing_tag(self, client):
        assert client.put(f"{TAGS}/nope", json={"color": "#fff"}).status_code == 404
        assert client.delete(f"{TAGS}/nope").status_code == 404


class TestApplicationTags:
    def test_attach_creates_tag_once(self, client):
        app = _create_application(client)
        r = client.post(f"{APPS}/{app['id']}/tags", json={"name": "Python"})
        assert r.status_code == 201
        client.post(f"{APPS}/{app['id']}/tags", json={"name": "python"})

        assert client.get(f"{APPS}/{app['id']}").json()["tags"] == ["Python"]
        tags = client.get(TAGS).json()
        assert len(tags) == 1
        assert tags[0]["usage_count"] == 1

    def test_reuses_tag_across_applications(self, client):
        a = _create_application(client, tags=["python"])
        b = _create_application(client)
        client.post(f"{APPS}/{b['id']}/tags", json={"name": "PYTHON"})
        assert client.get(TAGS).json()[0]["usage_count"] == 2
        assert client.get(f"{APPS}/{a['id']}").json()["tags"] == ["python"]

    def test_detach_keeps_tag(self, client):
        app = _create_application(client, tags=["python"])
        tag = client.get(TAGS).json()[0]
        r = client.delete(f"{APPS}/{app['id']}/tags/{tag['id']}")
        assert r.status_code == 200
        assert client.get(f"{APPS}/{app['id']}").json()["tags"] == []
        assert client.get(TAGS).json()[0]["usage_count"] == 0

    def test_unknown_application(self, client):
        assert client.post(f"{APPS}/nope/tags", json={"name": "python"}).status_code == 404
        assert client.delete(f"{APPS}/nope/tags/whatever").status_code == 404

    def test_blank_name(self, client):
        app = _create_application(client)
        assert client.post(f"{APPS}/{app['id']}/tags", json={"name": "  "}).status_code == 400

    def test_non_ascii_tag_reused_across_applications(self, client):
        a = _create_application(client, tags=["Énergie"])
        b = _create_application(client, tags=["Énergie"])
        c = _create_application(client, tags=["énergie"])
        for app in (a, b, c):
            assert app["tags"] == ["Énergie"]
        [tag] = client.get(TAGS).json()
        assert tag["usage_count"] == 3

    def test_non_ascii_attach_reuses_tag(self, client):
        a = _create_application(client)
        b = _create_application(client)
        assert client.post(f"{APPS}/{a['id']}/tags", json={"name": "Öko"}).status_code == 201
        assert client.post(f"{APPS}/{b['id']}/tags", json={"name": "öko"}).status_code == 201
        assert client.get(f"{APPS}/{b['id']}").json()["tags"] == ["Öko"]
        assert client.get(f"{APPS}?tag=ÖKO").json()["total"] == 2


class TestTagMerge:
    def test_merge_moves_links_and_drops_source(self, client):
        both = _create_application(client, tags=["py", "python"])
        only_source = _create_application(client, tags=["py"])
        by_name = {t["name"]: t for t in client.get(TAGS).json()}

        r = client.post(f"{TAGS}/merge", json={
            "source_id": by_name["py"]["id"],
            "target_id": by_name["python"]["id"],
        })
        assert r.status_code == 200
        assert r.json()["name"] == "python"
        assert r.json()["usage_count"] == 2

        assert [t["name"] for t in client.get(TAGS).json()] == ["python"]
        assert client.get(f"{APPS}/{both['id']}").json()["tags"] == ["python"]
        assert client.get(f"{APPS}/{only_source['id']}").json()["tags"] == ["python"]

    def test_merge_unknown_tag(self, client):
        tag = client.post(TAGS, json={"name": "python"}).json()
        r = client.post(f"{TAGS}/merge", json={"source_id": "missing", "target_id": tag["id"]})
        assert r.status_code == 404
        r = client.post(f"{TAGS}/merge", json={"source_id": tag["id"], "target_id": "missing"})
        assert r.status_code == 404
        assert len(client.get(TAGS).json()) == 1

    def test_merge_into_itself_rejected(self, client):
        tag = client.post(TAGS, json={"name": "python"}).json()
        r = client.post(f"{TAGS}/merge", json={"source_id": tag["id"], "target_id": tag["id"]})
        assert r.status_code == 400
