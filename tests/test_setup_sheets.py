import threading

from conftest import setup_sheet_payload
from millpoint.schemas import SetupSheetCreate


def test_create_setup_sheet(client, user, machine, program, make_setup_sheet):
    sheet = make_setup_sheet()
    assert sheet["programId"] == program["id"]
    # machineType defaults to the machine's type
    assert sheet["machineType"] == "Fræsemaskine"
    assert sheet["createdById"] == user.id
    assert [t["toolNumber"] for t in sheet["tools"]] == [1, 2]
    assert sheet["originOffsets"][0]["name"] == "G54"
    assert sheet["originOffsets"][0]["a"] == 0
    assert sheet["fixtures"][0]["fixtureId"] == "FIX-001"
    assert sheet["safetyChecklist"] == ["Safety glasses", "Check coolant level"]
    assert sheet["program"]["partNumber"] == program["partNumber"]
    assert sheet["approvedAt"] is None

    r = client.get(f"/api/programs/{program['id']}")
    assert r.json()["data"]["hasSetupSheet"] is True


def test_blank_media_entries_are_dropped(make_setup_sheet):
    sheet = make_setup_sheet(media=[
        {"type": "image", "url": "", "caption": "placeholder"},
        {"type": "image", "url": "/media/setup-1.jpg", "caption": "Overview"},
        {"type": "video", "url": "   "},
        {"type": "video", "url": "/media/probe.mp4", "annotations": ["probe cycle"]},
    ])
    assert [m["url"] for m in sheet["media"]] == ["/media/setup-1.jpg", "/media/probe.mp4"]
    # order defaults to the position after blank entries are removed
    assert [m["order"] for m in sheet["media"]] == [0, 1]
    assert sheet["media"][1]["annotations"] == ["probe cycle"]


def test_invalid_tools_write_nothing(client, auth_headers, machine, program):
    payload = setup_sheet_payload(program["id"], machine["id"], tools=[
        {"toolNumber": 1, "toolName": "Face Mill", "length": 100, "offsetH": 1, "offsetD": 1},
        {"toolNumber": 2, "toolName": "  ", "length": 50, "offsetH": 2, "offsetD": 2},
    ])
    r = client.post("/api/setup-sheets", json=payload, headers=auth_headers)
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    assert body["details"] == [{"path": "tools.1.toolName", "message": "Tool name is required"}]

    assert client.get("/api/setup-sheets", params={"programId": program["id"]}).json()["data"] == []
    assert client.get(f"/api/programs/{program['id']}").json()["data"]["hasSetupSheet"] is False


def test_tools_and_offsets_are_required(client, auth_headers, machine, program):
    payload = setup_sheet_payload(program["id"], machine["id"], tools=[], originOffsets=[])
    r = client.post("/api/setup-sheets", json=payload, headers=auth_headers)
    assert r.status_code == 400
    paths = {d["path"] for d in r.json()["details"]}
    assert {"tools", "originOffsets"} <= paths

    payload = setup_sheet_payload(program["id"], machine["id"])
    payload["tools"][0]["toolNumber"] = 0
    r = client.post("/api/setup-sheets", json=payload, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["details"][0]["path"] == "tools.0.toolNumber"


def test_create_for_missing_program(client, auth_headers, machine):
    r = client.post("/api/setup-sheets", json=setup_sheet_payload("missing", machine["id"]), headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"] == "Program not found"


def test_list_requires_program_id(client):
    r = client.get("/api/setup-sheets")
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_list_by_program(client, make_setup_sheet, program):
    first = make_setup_sheet()
    second = make_setup_sheet(machineType="Mill with 4th axis")
    r = client.get("/api/setup-sheets", params={"programId": program["id"]})
    ids = {s["id"] for s in r.json()["data"]}
    assert ids == {first["id"], second["id"]}


def test_update_replaces_only_supplied_collections(client, auth_headers, make_setup_sheet):
    sheet = make_setup_sheet()
    r = client.put(f"/api/setup-sheets/{sheet['id']}", json={
        "tools": [{"toolNumber": 7, "toolName": "Chamfer Mill", "length": 90, "offsetH": 7, "offsetD": 7}],
        "safetyChecklist": ["Close the door"],
    }, headers=auth_headers)
    assert r.status_code == 200
    updated = r.json()["data"]
    assert [t["toolNumber"] for t in updated["tools"]] == [7]
    assert updated["safetyChecklist"] == ["Close the door"]
    # untouched collections keep their rows
    assert updated["originOffsets"][0]["id"] == sheet["originOffsets"][0]["id"]
    assert updated["fixtures"][0]["id"] == sheet["fixtures"][0]["id"]

    r = client.get(f"/api/setup-sheets/{sheet['id']}")
    assert [t["toolName"] for t in r.json()["data"]["tools"]] == ["Chamfer Mill"]


def test_update_rejects_empty_tools(client, auth_headers, make_setup_sheet):
    sheet = make_setup_sheet()
    r = client.put(f"/api/setup-sheets/{sheet['id']}", json={"tools": []}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["details"][0]["path"] == "tools"
    r = client.get(f"/api/setup-sheets/{sheet['id']}")
    assert len(r.json()["data"]["tools"]) == 2


def test_approve_and_revoke(client, auth_headers, user, make_setup_sheet):
    sheet = make_setup_sheet()
    url = f"/api/setup-sheets/{sheet['id']}/approve"

    r = client.post(url, json={"approved": True, "comments": "OK"}, headers=auth_headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["approvedById"] == user.id
    assert data["approvedAt"] is not None
    assert r.json()["message"] == "Setup sheet approved"

    r = client.post(url, json={"approved": False}, headers=auth_headers)
    data = r.json()["data"]
    assert data["approvedById"] is None
    assert data["approvedAt"] is None


def test_delete_keeps_flag_until_last_sheet(client, auth_headers, program, make_setup_sheet):
    first = make_setup_sheet()
    second = make_setup_sheet()

    assert client.delete(f"/api/setup-sheets/{first['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/programs/{program['id']}").json()["data"]["hasSetupSheet"] is True

    assert client.delete(f"/api/setup-sheets/{second['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/programs/{program['id']}").json()["data"]["hasSetupSheet"] is False
    assert client.get(f"/api/setup-sheets/{second['id']}").status_code == 404


def test_machine_with_setup_sheets_cannot_be_deleted(client, auth_headers, make_machine, make_setup_sheet):
    other = make_machine(name="Okuma MU-6300V", type="5-akset fræser")
    make_setup_sheet(machineId=other["id"])
    r = client.delete(f"/api/machines/{other['id']}", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot delete machine with 1 associated setup sheets"


def test_concurrent_create_and_delete_keep_flag_consistent(client, app, user, program, machine, make_setup_sheet):
    service = app.state.setup_sheet_service
    # sheet writes and program writes share one lock registry
    assert service.locks is app.state.program_service.locks
    errors = []

    def run(fn, *args):
        try:
            fn(*args)
        except Exception as exc:  # collected and asserted below
            errors.append(exc)

    for _ in range(5):
        existing = make_setup_sheet()
        payload = SetupSheetCreate.model_validate(setup_sheet_payload(program["id"], machine["id"]))
        threads = [
            threading.Thread(target=run, args=(service.delete_setup_sheet, existing["id"], user)),
            threading.Thread(target=run, args=(service.create_setup_sheet, payload, user)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        sheets = client.get("/api/setup-sheets", params={"programId": program["id"]}).json()["data"]
        detail = client.get(f"/api/programs/{program['id']}").json()["data"]
        assert detail["hasSetupSheet"] is bool(sheets)
        for sheet in sheets:
            service.delete_setup_sheet(sheet["id"], user)
