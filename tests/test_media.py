import os

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def upload(client, headers, sheet_id, *files):
    return client.post(f"/api/setup-sheets/{sheet_id}/upload", files=[("files", f) for f in files], headers=headers)


def test_upload_serve_and_delete_media(client, auth_headers, app, make_setup_sheet):
    sheet = make_setup_sheet(media=[{"type": "image", "url": "/media/existing.jpg"}])

    r = upload(client, auth_headers, sheet["id"],
               ("fixture photo.png", PNG_BYTES, "image/png"),
               ("probe.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4"))
    assert r.status_code == 201
    uploaded = r.json()["data"]
    assert [m["type"] for m in uploaded] == ["image", "video"]
    assert uploaded[0]["caption"] == "fixture photo.png"
    assert uploaded[0]["filename"].endswith("-fixture_photo.png")
    assert uploaded[0]["url"] == f"/api/files/media/{uploaded[0]['filename']}"
    assert uploaded[0]["size"] == len(PNG_BYTES)

    detail = client.get(f"/api/setup-sheets/{sheet['id']}").json()["data"]
    # uploads are appended after the existing media
    assert [m["order"] for m in detail["media"]] == [0, 1, 2]

    r = client.get(uploaded[0]["url"])
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content == PNG_BYTES

    stored_path = app.state.storage.path_for("media", uploaded[0]["filename"])
    assert os.path.exists(stored_path)

    r = client.delete(f"/api/setup-sheets/{sheet['id']}/media/{uploaded[0]['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert not os.path.exists(stored_path)
    assert client.get(uploaded[0]["url"]).status_code == 404
    remaining = client.get(f"/api/setup-sheets/{sheet['id']}").json()["data"]["media"]
    assert len(remaining) == 2


def test_upload_rejects_unsupported_type(client, auth_headers, make_setup_sheet):
    sheet = make_setup_sheet()
    r = upload(client, auth_headers, sheet["id"], ("notes.txt", b"hello", "text/plain"))
    assert r.status_code == 400
    assert r.json()["details"][0]["path"] == "files.0"
    assert client.get(f"/api/setup-sheets/{sheet['id']}").json()["data"]["media"] == []


def test_upload_rejects_oversized_file(client, auth_headers, make_setup_sheet):
    # MAX_UPLOAD_BYTES is 1024 in the test settings
    sheet = make_setup_sheet()
    r = upload(client, auth_headers, sheet["id"], ("big.png", b"\x00" * 2048, "image/png"))
    assert r.status_code == 400
    assert "exceeds" in r.json()["details"][0]["message"]


def test_upload_to_missing_sheet(client, auth_headers):
    r = upload(client, auth_headers, "missing", ("a.png", PNG_BYTES, "image/png"))
    assert r.status_code == 404
    assert r.json()["error"] == "Setup sheet not found"


def test_delete_media_of_another_sheet_is_not_found(client, auth_headers, make_setup_sheet):
    first = make_setup_sheet(media=[{"type": "image", "url": "/media/a.jpg"}])
    second = make_setup_sheet()
    media_id = first["media"][0]["id"]
    r = client.delete(f"/api/setup-sheets/{second['id']}/media/{media_id}", headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"] == "Media not found"


def test_deleting_sheet_removes_uploaded_files(client, auth_headers, app, make_setup_sheet):
    sheet = make_setup_sheet()
    uploaded = upload(client, auth_headers, sheet["id"], ("a.png", PNG_BYTES, "image/png")).json()["data"]
    path = app.state.storage.path_for("media", uploaded[0]["filename"])
    assert os.path.exists(path)
    client.delete(f"/api/setup-sheets/{sheet['id']}", headers=auth_headers)
    assert not os.path.exists(path)


def test_missing_media_file(client):
    r = client.get("/api/files/media/nothing-here.png")
    assert r.status_code == 404
    assert r.json()["error"] == "File not found"


def test_replacing_media_removes_dropped_uploads(client, auth_headers, app, make_setup_sheet):
    sheet = make_setup_sheet()
    uploaded = upload(client, auth_headers, sheet["id"],
                      ("keep.png", PNG_BYTES, "image/png"),
                      ("drop.png", PNG_BYTES, "image/png")).json()["data"]
    keep, drop = (app.state.storage.path_for("media", m["filename"]) for m in uploaded)

    r = client.put(f"/api/setup-sheets/{sheet['id']}",
                   json={"media": [{"type": "image", "url": uploaded[0]["url"], "caption": "Kept"}]},
                   headers=auth_headers)
    assert r.status_code == 200
    assert [m["url"] for m in r.json()["data"]["media"]] == [uploaded[0]["url"]]
    assert os.path.exists(keep)
    assert not os.path.exists(drop)


def test_deleting_program_removes_uploaded_files(client, auth_headers, app, program, make_setup_sheet):
    sheet = make_setup_sheet()
    uploaded = upload(client, auth_headers, sheet["id"], ("a.png", PNG_BYTES, "image/png")).json()["data"]
    path = app.state.storage.path_for("media", uploaded[0]["filename"])
    assert os.path.exists(path)

    assert client.delete(f"/api/programs/{program['id']}", headers=auth_headers).status_code == 200
    assert not os.path.exists(path)
