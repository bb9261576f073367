from conftest import ALICE


def test_stats(client, inventory):
    base = f"/inventories/{inventory['id']}"
    fields = client.put(f"{base}/fields", json={"fields": [
        {"type": "NUMBER", "title": "Weight"},
        {"type": "SINGLE_LINE_TEXT", "title": "Color"},
        {"type": "NUMBER", "title": "Age"},
    ]}, headers=ALICE).json()["fields"]
    ids = {f["title"]: f["id"] for f in fields}

    for weight, color in ((2, "A"), (4, "a "), (6, "B"), (None, "A")):
        values = [{"fieldId": ids["Color"], "valueString": color}]
        if weight is not None:
            values.append({"fieldId": ids["Weight"], "valueNumber": weight})
        client.post(f"{base}/items", json={"fields": values}, headers=ALICE)

    stats = client.get(f"{base}/stats").json()
    assert stats["itemCount"] == 4
    assert stats["numericFields"] == [
        {"fieldId": ids["Weight"], "title": "Weight", "count": 3, "min": 2.0, "max": 6.0, "avg": 4.0},
    ]
    (color,) = stats["textFields"]
    assert color["topValues"] == [
        {"value": "A", "count": 2}, {"value": "B", "count": 1}, {"value": "a", "count": 1},
    ]


def test_empty_inventory(client, inventory):
    stats = client.get(f"/inventories/{inventory['id']}/stats").json()
    assert stats == {"itemCount": 0, "numericFields": [], "textFields": []}


def test_stats_unknown_inventory(client):
    assert client.get("/inventories/999/stats").status_code == 404
