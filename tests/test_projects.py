from sqlalchemy import select, func

from collabhub.files.models import File
from collabhub.projects.models import Project


def test_create_list_rename(client, make_user):
    a, ha = make_user("a@example.com")
    r = client.post("/projects", json={"name": "Reports"}, headers=ha)
    assert r.status_code == 201
    p = r.json()
    assert p["owner_id"] == a.id

    items = client.get("/projects", headers=ha).json()["items"]
    assert [i["name"] for i in items] == ["Reports"]

    r = client.patch(f"/projects/{p['id']}", json={"name": "Q1 Reports"}, headers=ha)
    assert r.status_code == 200
    assert r.json()["name"] == "Q1 Reports"

def test_blank_name_rejected(client, make_user):
    _, ha = make_user("a@example.com")
    r = client.post("/projects", json={"name": "   "}, headers=ha)
    assert r.status_code == 422

def test_only_owner_can_rename(client, make_user):
    _, ha = make_user("a@example.com")
    _, hb = make_user("b@example.com")
    pid = client.post("/projects", json={"name": "Reports"}, headers=ha).json()["id"]
    r = client.patch(f"/projects/{pid}", json={"name": "Mine now"}, headers=hb)
    assert r.status_code == 403
    assert client.get("/projects", headers=hb).json()["items"] == []

def test_rename_missing_project(client, make_user):
    _, ha = make_user("a@example.com")
    assert client.patch("/projects/nope", json={"name": "x"}, headers=ha).status_code == 404

def test_delete_project_removes_files_and_objects(client, db, store, make_user, upload):
    _, ha = make_user("a@example.com")
    pid = client.post("/projects", json={"name": "Reports"}, headers=ha).json()["id"]
    keys = [upload(ha, name=f"r{i}.pdf", project_id=pid)["key"] for i in range(3)]
    loose = upload(ha, name="loose.pdf")

    r = client.delete(f"/projects/{pid}", headers=ha)
    assert r.status_code == 200
    assert r.json()["data"]["deleted_files"] == 3

    assert sorted(store.deleted) == sorted(keys)
    db.expire_all()
    assert db.get(Project, pid) is None
    remaining = db.scalars(select(File.id)).all()
    assert remaining == [loose["id"]]

def test_delete_project_storage_failures_are_warnings(client, db, store, make_user, upload):
    _, ha = make_user("a@example.com")
    pid = client.post("/projects", json={"name": "Reports"}, headers=ha).json()["id"]
    upload(ha, project_id=pid)
    upload(ha, project_id=pid)
    store.fail_deletes = True

    r = client.delete(f"/projects/{pid}", headers=ha)
    assert r.status_code == 200
    assert len(r.json()["warnings"]) == 2
    assert len(store.deleted) == 2
    assert db.scalar(select(func.count()).select_from(File)) == 0

def test_only_owner_can_delete_project(client, store, make_user, upload):
    _, ha = make_user("a@example.com")
    _, hb = make_user("b@example.com")
    pid = client.post("/projects", json={"name": "Reports"}, headers=ha).json()["id"]
    upload(ha, project_id=pid)
    assert client.delete(f"/projects/{pid}", headers=hb).status_code == 403
    assert store.deleted == []
