from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


def _create(client: TestClient, headers, title: str, **extra) -> int:
    body = {"title": title, "noteType": "freetext", "body": "", "displayOrder": 0}
    body.update(extra)
    resp = client.post("/notes", json=body, headers=headers)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["success"] is True
    return data["noteId"]


def _list(client: TestClient, headers) -> list[dict]:
    resp = client.get("/notes", headers=headers)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["success"] is True
    return data["notes"]


def _orders(client: TestClient, headers) -> list[int]:
    return [n["displayOrder"] for n in _list(client, headers)]


def test_list_notes_empty(client, alice) -> None:
    assert _list(client, alice) == []


def test_notes_require_bearer_credential(client) -> None:
    assert client.get("/notes").status_code == 401
    resp = client.get("/notes", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_mutations_reject_missing_credential_before_validation(client) -> None:
    assert client.post("/notes", json={}).status_code == 401
    assert client.put("/notes/reorder", json={"noteIds": [1]}).status_code == 401
    assert client.delete("/notes/subitems/1").status_code == 401


def test_create_note_with_subitems_is_listed_nested(client, alice) -> None:
    resp = client.post(
        "/notes",
        json={
            "title": "Packing",
            "noteType": "subitems",
            "subitems": [
                {"text": "socks", "isChecked": False},
                {"text": "passport", "isChecked": True},
            ],
            "displayOrder": 0,
        },
        headers=alice,
    )
    assert resp.status_code == 200
    created = resp.json()
    assert len(created["subitemIds"]) == 2

    notes = _list(client, alice)
    assert len(notes) == 1
    note = notes[0]
    assert note["noteId"] == created["noteId"]
    assert note["noteType"] == "subitems"
    assert [s["text"] for s in note["subitems"]] == ["socks", "passport"]
    assert [s["isChecked"] for s in note["subitems"]] == [False, True]
    assert [s["subitemId"] for s in note["subitems"]] == created["subitemIds"]
    assert all(s["noteId"] == note["noteId"] for s in note["subitems"])


def test_create_note_validation_errors_are_400(client, alice) -> None:
    missing_title = client.post("/notes", json={"noteType": "freetext"}, headers=alice)
    assert missing_title.status_code == 400
    blank_title = client.post("/notes", json={"title": "   ", "noteType": "freetext"}, headers=alice)
    assert blank_title.status_code == 400
    bad_type = client.post("/notes", json={"title": "x", "noteType": "kanban"}, headers=alice)
    assert bad_type.status_code == 400
    assert bad_type.json()["success"] is False
    assert _list(client, alice) == []


def test_create_note_assigns_next_display_order(client, alice) -> None:
    _create(client, alice, "first")
    # A stale client value does not break contiguity
    _create(client, alice, "second", displayOrder=0)
    _create(client, alice, "third", displayOrder=9)
    assert _orders(client, alice) == [0, 1, 2]
    assert [n["title"] for n in _list(client, alice)] == ["first", "second", "third"]


def test_create_note_rolls_back_when_subitem_insert_fails(client, alice, monkeypatch) -> None:
    _create(client, alice, "keep")
    real_flush = AsyncSession.flush
    flushes: list[int] = []

    async def failing_second_flush(self, *args, **kwargs):
        flushes.append(1)
        if len(flushes) == 2:
            raise OperationalError("INSERT INTO subitems", {}, Exception("disk I/O error"))
        await real_flush(self, *args, **kwargs)

    monkeypatch.setattr(AsyncSession, "flush", failing_second_flush)
    resp = client.post(
        "/notes",
        json={"title": "broken", "noteType": "subitems", "subitems": [{"text": "a"}], "displayOrder": 1},
        headers=alice,
    )
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to create note"}
    assert len(flushes) == 2

    monkeypatch.undo()
    notes = _list(client, alice)
    assert [(n["title"], n["displayOrder"]) for n in notes] == [("keep", 0)]
    _create(client, alice, "next")
    assert _orders(client, alice) == [0, 1]


def test_delete_note_renumbers_survivors_and_keeps_other_subitems(client, alice) -> None:
    a = _create(client, alice, "a", noteType="subitems", subitems=[{"text": "a1"}])
    b = _create(client, alice, "b", noteType="subitems", subitems=[{"text": "b1"}])
    c = _create(client, alice, "c", noteType="subitems", subitems=[{"text": "c1"}, {"text": "c2"}])

    resp = client.request("DELETE", "/notes", json={"noteId": b}, headers=alice)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    notes = _list(client, alice)
    assert [n["noteId"] for n in notes] == [a, c]
    assert [n["displayOrder"] for n in notes] == [0, 1]
    assert [len(n["subitems"]) for n in notes] == [1, 2]


def test_delete_note_cascades_to_subitems(client, alice) -> None:
    note_id = _create(client, alice, "list", noteType="subitems", subitems=[{"text": "x"}])
    subitem_id = _list(client, alice)[0]["subitems"][0]["subitemId"]
    client.request("DELETE", "/notes", json={"noteId": note_id}, headers=alice)
    resp = client.patch(f"/notes/subitems/text/{subitem_id}", json={"text": "y"}, headers=alice)
    assert resp.status_code == 404


def test_delete_missing_note_is_404(client, alice) -> None:
    resp = client.request("DELETE", "/notes", json={"noteId": 999}, headers=alice)
    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_update_title_and_body_are_field_scoped(client, alice) -> None:
    note_id = _create(client, alice, "old title", body="old body")
    assert client.put("/notes/title", json={"noteId": note_id, "title": "new title"}, headers=alice).status_code == 200
    note = _list(client, alice)[0]
    assert note["title"] == "new title"
    assert note["body"] == "old body"

    assert client.put("/notes/body", json={"noteId": note_id, "body": "new body"}, headers=alice).status_code == 200
    note = _list(client, alice)[0]
    assert note["title"] == "new title"
    assert note["body"] == "new body"


def test_update_title_of_foreign_note_is_404_and_unchanged(client, alice, bob) -> None:
    note_id = _create(client, alice, "mine")
    resp = client.put("/notes/title", json={"noteId": note_id, "title": "stolen"}, headers=bob)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Note not found or unauthorized"
    assert _list(client, alice)[0]["title"] == "mine"

    resp = client.put("/notes/body", json={"noteId": note_id, "body": "stolen"}, headers=bob)
    assert resp.status_code == 404


def test_foreign_and_missing_notes_look_the_same(client, alice, bob) -> None:
    note_id = _create(client, alice, "mine")
    foreign = client.request("DELETE", "/notes", json={"noteId": note_id}, headers=bob)
    missing = client.request("DELETE", "/notes", json={"noteId": note_id + 100}, headers=bob)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()
    assert len(_list(client, alice)) == 1


def test_groceries_scenario(client, alice) -> None:
    note_id = _create(client, alice, "Groceries", noteType="subitems", subitems=[])
    resp = client.post("/notes/subitems", json={"noteId": note_id, "text": "milk"}, headers=alice)
    assert resp.status_code == 200
    subitem_id = resp.json()["subitemId"]

    resp = client.patch(f"/notes/subitems/checkbox/{subitem_id}", json={"isChecked": True}, headers=alice)
    assert resp.status_code == 200

    notes = _list(client, alice)
    assert len(notes) == 1
    assert notes[0]["subitems"] == [
        {"subitemId": subitem_id, "noteId": note_id, "text": "milk", "isChecked": True}
    ]


def test_subitem_text_update_and_delete(client, alice) -> None:
    note_id = _create(client, alice, "todo", noteType="subitems")
    first = client.post("/notes/subitems", json={"noteId": note_id, "text": "one"}, headers=alice).json()["subitemId"]
    second = client.post("/notes/subitems", json={"noteId": note_id, "text": "two"}, headers=alice).json()["subitemId"]

    assert client.patch(f"/notes/subitems/text/{first}", json={"text": "uno"}, headers=alice).status_code == 200
    assert client.delete(f"/notes/subitems/{second}", headers=alice).status_code == 200

    subitems = _list(client, alice)[0]["subitems"]
    assert [(s["subitemId"], s["text"], s["isChecked"]) for s in subitems] == [(first, "uno", False)]


def test_subitem_operations_on_foreign_rows_are_404(client, alice, bob) -> None:
    note_id = _create(client, alice, "todo", noteType="subitems")
    subitem_id = client.post(
        "/notes/subitems", json={"noteId": note_id, "text": "private"}, headers=alice
    ).json()["subitemId"]

    assert client.post("/notes/subitems", json={"noteId": note_id, "text": "x"}, headers=bob).status_code == 404
    assert client.patch(f"/notes/subitems/checkbox/{subitem_id}", json={"isChecked": True}, headers=bob).status_code == 404
    assert client.patch(f"/notes/subitems/text/{subitem_id}", json={"text": "x"}, headers=bob).status_code == 404
    assert client.delete(f"/notes/subitems/{subitem_id}", headers=bob).status_code == 404

    subitems = _list(client, alice)[0]["subitems"]
    assert subitems == [{"subitemId": subitem_id, "noteId": note_id, "text": "private", "isChecked": False}]


def test_checkbox_body_must_be_boolean(client, alice) -> None:
    note_id = _create(client, alice, "todo", noteType="subitems")
    subitem_id = client.post("/notes/subitems", json={"noteId": note_id, "text": "a"}, headers=alice).json()["subitemId"]
    resp = client.patch(f"/notes/subitems/checkbox/{subitem_id}", json={"isChecked": "maybe"}, headers=alice)
    assert resp.status_code == 400


def test_reorder_two_notes(client, alice) -> None:
    first = _create(client, alice, "five")
    second = _create(client, alice, "seven")
    resp = client.put("/notes/reorder", json={"noteIds": [second, first]}, headers=alice)
    assert resp.status_code == 200
    notes = _list(client, alice)
    assert [n["noteId"] for n in notes] == [second, first]
    assert [n["displayOrder"] for n in notes] == [0, 1]


def test_reorder_round_trip(client, alice) -> None:
    ids = [_create(client, alice, f"n{i}") for i in range(5)]
    wanted = [ids[3], ids[0], ids[4], ids[2], ids[1]]
    assert client.put("/notes/reorder", json={"noteIds": wanted}, headers=alice).status_code == 200
    notes = _list(client, alice)
    assert [n["noteId"] for n in notes] == wanted
    assert [n["displayOrder"] for n in notes] == list(range(5))


def test_reorder_with_foreign_id_aborts_everything(client, alice, bob) -> None:
    mine = [_create(client, alice, "a"), _create(client, alice, "b")]
    theirs = _create(client, bob, "c")
    resp = client.put("/notes/reorder", json={"noteIds": [mine[1], theirs]}, headers=alice)
    assert resp.status_code == 404
    assert [n["noteId"] for n in _list(client, alice)] == mine
    assert _orders(client, bob) == [0]


def test_reorder_must_be_a_full_permutation(client, alice) -> None:
    ids = [_create(client, alice, "a"), _create(client, alice, "b"), _create(client, alice, "c")]
    duplicate = client.put("/notes/reorder", json={"noteIds": [ids[0], ids[0], ids[1]]}, headers=alice)
    assert duplicate.status_code == 400
    partial = client.put("/notes/reorder", json={"noteIds": [ids[2], ids[0]]}, headers=alice)
    assert partial.status_code == 400
    assert [n["noteId"] for n in _list(client, alice)] == ids


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}
