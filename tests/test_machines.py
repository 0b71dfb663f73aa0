def test_create_and_get_machine(client, auth_headers):
    r = client.post("/api/machines", json={
        "name": "DMG Mori DMU 50",
        "type": "Fræsemaskine",
        "manufacturer": "DMG Mori",
        "model": "DMU 50",
        "ipAddress": "192.168.1.101",
        "capabilities": {"axes": 5, "maxRpm": 18000},
    }, headers=auth_headers)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    machine = body["data"]
    assert machine["status"] == "Offline"
    assert machine["nextProgramNumber"] == 100
    assert machine["capabilities"] == {"axes": 5, "maxRpm": 18000}

    r = client.get(f"/api/machines/{machine['id']}")
    assert r.status_code == 200
    detail = r.json()["data"]
    assert detail["name"] == "DMG Mori DMU 50"
    assert detail["ipAddress"] == "192.168.1.101"
    assert detail["programs"] == []


def test_list_filters_and_program_counts(client, make_machine, make_program, machine):
    make_machine(name="Mazak Integrex i-200", type="Drejebænk", manufacturer="Mazak", model="Integrex i-200")
    make_machine(name="Sodick AQ537L", type="EDM", manufacturer="Sodick", model="AQ537L", status="Maintenance")
    make_program()
    make_program(name="Second op")

    r = client.get("/api/machines")
    names = [m["name"] for m in r.json()["data"]]
    assert names == ["Haas VF-2", "Mazak Integrex i-200", "Sodick AQ537L"]
    counts = {m["name"]: m["programCount"] for m in r.json()["data"]}
    assert counts == {"Haas VF-2": 2, "Mazak Integrex i-200": 0, "Sodick AQ537L": 0}

    r = client.get("/api/machines", params={"type": "edm"})
    assert [m["name"] for m in r.json()["data"]] == ["Sodick AQ537L"]

    r = client.get("/api/machines", params={"status": "Maintenance"})
    assert [m["name"] for m in r.json()["data"]] == ["Sodick AQ537L"]

    r = client.get("/api/machines", params={"search": "integrex"})
    assert [m["name"] for m in r.json()["data"]] == ["Mazak Integrex i-200"]


def test_machine_detail_lists_programs(client, machine, make_program):
    make_program(name="Op 10")
    r = client.get(f"/api/machines/{machine['id']}")
    programs = r.json()["data"]["programs"]
    assert len(programs) == 1
    assert programs[0]["name"] == "Op 10"
    assert programs[0]["partNumber"] == "0100"


def test_update_and_patch_status(client, auth_headers, machine):
    r = client.put(f"/api/machines/{machine['id']}", json={"model": "VF-2SS"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["data"]["model"] == "VF-2SS"
    assert r.json()["data"]["name"] == "Haas VF-2"

    r = client.patch(f"/api/machines/{machine['id']}/status", json={"status": "Online"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "Online"


def test_update_rejects_null_name_and_type(client, auth_headers, machine):
    r = client.put(f"/api/machines/{machine['id']}", json={"name": None, "type": None}, headers=auth_headers)
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    assert {d["path"] for d in body["details"]} == {"name", "type"}

    r = client.get(f"/api/machines/{machine['id']}")
    assert r.json()["data"]["name"] == "Haas VF-2"


def test_invalid_status_is_a_validation_error(client, auth_headers, machine):
    r = client.patch(f"/api/machines/{machine['id']}/status", json={"status": "Broken"}, headers=auth_headers)
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    assert body["details"][0]["path"] == "status"


def test_create_requires_name_and_type(client, auth_headers):
    r = client.post("/api/machines", json={"manufacturer": "Haas"}, headers=auth_headers)
    assert r.status_code == 400
    paths = {d["path"] for d in r.json()["details"]}
    assert {"name", "type"} <= paths


def test_missing_machine_is_not_found(client, auth_headers):
    r = client.get("/api/machines/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Machine not found", "code": "NOT_FOUND"}

    r = client.put("/api/machines/does-not-exist", json={"name": "X"}, headers=auth_headers)
    assert r.status_code == 404


def test_delete_is_blocked_while_programs_reference_machine(client, auth_headers, machine, make_program):
    program = make_program()
    r = client.delete(f"/api/machines/{machine['id']}", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot delete machine with 1 associated programs"
    assert client.get(f"/api/machines/{machine['id']}").status_code == 200

    client.delete(f"/api/programs/{program['id']}", headers=auth_headers)
    r = client.delete(f"/api/machines/{machine['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Machine deleted successfully"}
    assert client.get(f"/api/machines/{machine['id']}").status_code == 404
