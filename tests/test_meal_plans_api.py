# tests/test_meal_plans_api.py
# План питания и списки покупок.


def _item(client, name, ingredients, category="Dinner"):
    resp = client.post(
        "/api/menu/items",
        json={"name": name, "category": category, "ingredients": ingredients},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _plan(client, item_id, day, meal_type="dinner"):
    resp = client.post(
        "/api/meals/plans",
        json={"menu_item_id": item_id, "planned_date": day, "meal_type": meal_type},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_plans_in_range_ordered_by_date_and_meal(login):
    client, user = login("Alice")
    soup = _item(client, "Soup", [], category="Lunch")
    oats = _item(client, "Oats", [], category="Breakfast")

    _plan(client, soup["id"], "2026-03-02", "lunch")
    _plan(client, oats["id"], "2026-03-02", "breakfast")
    _plan(client, soup["id"], "2026-03-01", "dinner")
    _plan(client, soup["id"], "2026-03-09", "dinner")

    plans = client.get("/api/meals/plans", params={"start_date": "2026-03-01", "end_date": "2026-03-07"}).json()
    assert [(p["planned_date"], p["meal_type"]) for p in plans] == [
        ("2026-03-01", "dinner"),
        ("2026-03-02", "breakfast"),
        ("2026-03-02", "lunch"),
    ]
    assert plans[1]["meal_name"] == "Oats"
    assert all(p["user_id"] == user["id"] for p in plans)

    day = client.get("/api/meals/plans/day/2026-03-02").json()
    assert [p["meal_name"] for p in day] == ["Oats", "Soup"]


def test_invalid_range_is_400(login):
    client, _ = login("Alice")
    resp = client.get("/api/meals/plans", params={"start_date": "2026-03-07", "end_date": "2026-03-01"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "invalid_date_range"


def test_cannot_plan_invisible_item(login):
    alice, _ = login("Alice")
    eve, _ = login("Eve")
    soup = _item(alice, "Soup", [])

    resp = eve.post("/api/meals/plans", json={"menu_item_id": soup["id"], "planned_date": "2026-03-01"})
    assert resp.status_code == 404


def test_update_and_delete_plan_only_own(login):
    alice, _ = login("Alice")
    eve, _ = login("Eve")
    soup = _item(alice, "Soup", [])
    plan = _plan(alice, soup["id"], "2026-03-01")

    assert eve.put(f"/api/meals/plans/{plan['id']}", json={"completed": True}).status_code == 404
    assert eve.delete(f"/api/meals/plans/{plan['id']}").status_code == 404

    updated = alice.put(f"/api/meals/plans/{plan['id']}", json={"completed": True, "notes": "double batch"})
    assert updated.status_code == 200
    assert updated.json()["completed"] is True
    assert updated.json()["notes"] == "double batch"

    assert alice.delete(f"/api/meals/plans/{plan['id']}").status_code == 200
    assert alice.get("/api/meals/plans/day/2026-03-01").json() == []


def test_shopping_list_sums_by_ingredient_and_unit(login):
    client, _ = login("Alice")
    pasta = _item(
        client,
        "Pasta",
        [
            {"name": "Tomato", "category": "Produce", "quantity": 2, "unit": "pcs"},
            {"name": "Cheese", "category": "Dairy", "quantity": 100, "unit": "g"},
        ],
    )
    salad = _item(
        client,
        "Salad",
        [
            {"name": "Tomato", "quantity": 3, "unit": "pcs"},
            {"name": "Cheese", "quantity": 1, "unit": "cup"},
        ],
    )
    _plan(client, pasta["id"], "2026-03-01")
    _plan(client, salad["id"], "2026-03-02")
    _plan(client, pasta["id"], "2026-03-03")
    # вне диапазона - не учитывается
    _plan(client, salad["id"], "2026-03-10")

    resp = client.post(
        "/api/meals/plans/shopping-list",
        json={"start_date": "2026-03-01", "end_date": "2026-03-03", "name": "Week 10"},
    )
    assert resp.status_code == 201
    sl = resp.json()
    assert sl["name"] == "Week 10"
    got = {(i["ingredient_name"], i["unit"]): i["quantity"] for i in sl["items"]}
    assert got == {
        ("Tomato", "pcs"): 7.0,
        ("Cheese", "g"): 200.0,
        ("Cheese", "cup"): 1.0,
    }
    assert sl["item_count"] == 3
    assert sl["checked_count"] == 0


def test_shopping_list_default_name_and_toggle(login):
    client, _ = login("Alice")
    soup = _item(client, "Soup", [{"name": "Onion", "quantity": 1, "unit": "pcs"}])
    _plan(client, soup["id"], "2026-03-01")

    sl = client.post(
        "/api/meals/plans/shopping-list",
        json={"startDate": "2026-03-01", "endDate": "2026-03-01"},
    ).json()
    assert sl["name"].startswith("Shopping List ")

    item_id = sl["items"][0]["id"]
    toggled = client.patch(f"/api/meals/shopping-lists/{sl['id']}/items/{item_id}")
    assert toggled.status_code == 200
    assert toggled.json()["checked"] is True
    assert toggled.json()["ingredient_name"] == "Onion"

    lists = client.get("/api/meals/shopping-lists").json()
    assert lists[0]["checked_count"] == 1
    assert lists[0]["item_count"] == 1

    assert client.patch(f"/api/meals/shopping-lists/{sl['id']}/items/999").status_code == 404


def test_shopping_lists_are_private(login):
    alice, _ = login("Alice")
    eve, _ = login("Eve")
    sl = alice.post(
        "/api/meals/plans/shopping-list",
        json={"start_date": "2026-03-01", "end_date": "2026-03-01"},
    ).json()
    assert sl["items"] == []

    assert eve.get(f"/api/meals/shopping-lists/{sl['id']}").status_code == 404
    assert eve.delete(f"/api/meals/shopping-lists/{sl['id']}").status_code == 404

    assert alice.delete(f"/api/meals/shopping-lists/{sl['id']}").status_code == 200
    assert alice.get(f"/api/meals/shopping-lists/{sl['id']}").status_code == 404
