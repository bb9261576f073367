import re

from conftest import ALICE


def test_field_cap_rejects_whole_list(client, inventory):
    url = f"/inventories/{inventory['id']}/fields"
    client.put(url, json={"fields": [{"type": "LINK", "title": "Manual"}]}, headers=ALICE)

    response = client.put(url, json={"fields": [
        {"type": "NUMBER", "title": f"n{i}"} for i in range(4)
    ]}, headers=ALICE)
    assert response.status_code == 400
    assert "Maximum is 3" in response.json()["message"]
    assert [f["title"] for f in client.get(url).json()["fields"]] == ["Manual"]


def test_unsupported_field_type(client, inventory):
    response = client.put(
        f"/inventories/{inventory['id']}/fields",
        json={"fields": [{"type": "DATE", "title": "Due"}]},
        headers=ALICE,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Unsupported field type: DATE"


def test_fields_are_ordered_by_position(client, inventory):
    response = client.put(f"/inventories/{inventory['id']}/fields", json={"fields": [
        {"type": "BOOLEAN", "title": "Broken", "showInTable": True},
        {"type": "NUMBER", "title": "Weight", "description": "kg"},
    ]}, headers=ALICE)
    fields = response.json()["fields"]
    assert [(f["title"], f["orderIndex"]) for f in fields] == [("Broken", 0), ("Weight", 1)]
    assert fields[0]["showInTable"] is True
    assert fields[1]["description"] == "kg"


def test_kept_fields_keep_their_values(client, inventory):
    url = f"/inventories/{inventory['id']}/fields"
    fields = client.put(url, json={"fields": [
        {"type": "NUMBER", "title": "Weight"},
        {"type": "SINGLE_LINE_TEXT", "title": "Color"},
    ]}, headers=ALICE).json()["fields"]
    weight, color = fields
    item = client.post(f"/inventories/{inventory['id']}/items", json={"fields": [
        {"fieldId": weight["id"], "valueNumber": 7},
        {"fieldId": color["id"], "valueString": "red"},
    ]}, headers=ALICE).json()

    response = client.put(url, json={"fields": [
        {"type": "BOOLEAN", "title": "Broken"},
        {"id": weight["id"], "type": "NUMBER", "title": "Mass"},
    ]}, headers=ALICE)
    assert response.status_code == 200
    kept = response.json()["fields"][1]
    assert kept["id"] == weight["id"]
    assert kept["title"] == "Mass"

    values = client.get(f"/items/{item['id']}").json()["fields"]
    assert [(v["title"], v["valueNumber"]) for v in values] == [("Mass", 7)]


def test_custom_id_format_round_trip(client, inventory):
    url = f"/inventories/{inventory['id']}/custom-id"
    response = client.put(url, json={"elements": [
        {"type": "SEQUENCE", "orderIndex": 5},
        {"type": "FIXED_TEXT", "fixedText": "LAB-", "orderIndex": 1},
        {"type": "GUID", "numberWidth": 4},
    ]}, headers=ALICE)
    assert response.status_code == 200
    elements = client.get(url).json()["elements"]
    assert [(e["type"], e["orderIndex"]) for e in elements] == [
        ("FIXED_TEXT", 0), ("GUID", 1), ("SEQUENCE", 2),
    ]
    assert elements[1]["numberWidth"] is None


def test_invalid_width_keeps_previous_format(client, inventory):
    url = f"/inventories/{inventory['id']}/custom-id"
    client.put(url, json={"elements": [{"type": "SEQUENCE", "numberWidth": 2}]}, headers=ALICE)

    response = client.put(url, json={"elements": [{"type": "SEQUENCE", "numberWidth": 0}]}, headers=ALICE)
    assert response.status_code == 400
    assert client.get(url).json()["elements"][0]["numberWidth"] == 2


def test_unsupported_element_type(client, inventory):
    response = client.put(
        f"/inventories/{inventory['id']}/custom-id",
        json={"elements": [{"type": "EMOJI"}]},
        headers=ALICE,
    )
    assert response.status_code == 400


def test_cleared_format_previews_fallback(client, inventory):
    url = f"/inventories/{inventory['id']}/custom-id"
    client.put(url, json={"elements": [{"type": "FIXED_TEXT", "fixedText": "X"}]}, headers=ALICE)
    assert client.put(url, json={"elements": []}, headers=ALICE).json() == {"elements": []}

    preview = client.get(f"{url}/preview").json()["preview"]
    assert re.fullmatch(r"INV-[0-9A-Z]{6}", preview)


def test_preview_does_not_reserve(client, inventory):
    base = f"/inventories/{inventory['id']}"
    client.put(f"{base}/custom-id", json={"elements": [{"type": "SEQUENCE", "numberWidth": 2}]}, headers=ALICE)
    assert client.get(f"{base}/custom-id/preview").json()["preview"] == "01"
    assert client.get(f"{base}/custom-id/preview").json()["preview"] == "01"
    assert client.post(f"{base}/items", headers=ALICE).json()["customId"] == "01"


def test_schema_writes_require_principal(client, inventory):
    response = client.put(f"/inventories/{inventory['id']}/fields", json={"fields": []})
    assert response.status_code == 401


def test_overlong_field_title_is_rejected(client, inventory):
    response = client.put(
        f"/inventories/{inventory['id']}/fields",
        json={"fields": [{"type": "NUMBER", "title": "w" * 256}]},
        headers=ALICE,
    )
    assert response.status_code == 422
