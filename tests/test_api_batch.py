from datetime import date, timedelta

from sqlmodel import select

from clearstock.model.product_batch import ProductBatch
from clearstock.model.stock_event import StockEvent, StockEventType
from clearstock.services.restaurant_service import provision_restaurant


def _batch_form(**overrides):
    form = {
        "name": "Leite",
        "quantity": "2",
        "unit": "kg",
        "expiryDate": (date.today() + timedelta(days=1)).isoformat(),
    }
    form.update(overrides)
    return form


def _create(client, **overrides):
    response = client.post("/batch", data=_batch_form(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["id"]


def test_batch_routes_require_auth(client):
    assert client.post("/batch", data=_batch_form()).status_code == 401
    assert client.get("/batch/list").status_code == 401


def test_create_and_list(auth_client, session, restaurant):
    batch_id = _create(auth_client)

    body = auth_client.get("/batch/list").json()

    assert body["total"] == 1
    group = body["groups"][0]
    assert group["category"] == "Sem Categoria"
    assert group["urgent_count"] == 1
    item = group["items"][0]
    assert item["id"] == batch_id
    assert item["expiry_status"] == "URGENT"
    assert item["expiry_label"].startswith("Urgente usar")

    events = session.exec(select(StockEvent)).all()
    assert [(e.type, e.quantity) for e in events] == [(StockEventType.ENTRY, 2)]


def test_create_validation_error_is_400(auth_client, session):
    response = auth_client.post("/batch", data=_batch_form(name=""))

    assert response.status_code == 400
    assert response.json()["error"].startswith("Por favor, preencha todos os campos obrigatórios")
    assert session.exec(select(ProductBatch)).all() == []


def test_create_with_category_and_location(auth_client):
    settings_page = auth_client.get("/settings").json()
    frescos = next(c for c in settings_page["categories"] if c["name"] == "Frescos")
    despensa = next(loc for loc in settings_page["locations"] if loc["name"] == "Despensa")

    _create(auth_client, categoryId=str(frescos["id"]), locationId=str(despensa["id"]), quantity="0")

    item = auth_client.get("/batch/list").json()["groups"][0]["items"][0]
    assert item["category_name"] == "Frescos"
    assert item["location_name"] == "Despensa"
    assert item["quantity"] == 1


def test_adjust(auth_client):
    batch_id = _create(auth_client)

    response = auth_client.post(f"/batch/{batch_id}/adjust", data={"adjustment": "-5"})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Quantidade ajustada para 0 kg"
    assert body["status"] == "USED"
    assert body["wasted"] == 2

    assert auth_client.post(f"/batch/{batch_id}/adjust", data={"adjustment": "abc"}).status_code == 400


def test_update(auth_client, session):
    batch_id = _create(auth_client)

    response = auth_client.put(f"/batch/{batch_id}", data=_batch_form(name="Leite magro", quantity="3"))

    assert response.status_code == 200
    stored = session.get(ProductBatch, batch_id)
    assert (stored.name, stored.quantity) == ("Leite magro", 3)
    assert len(session.exec(select(StockEvent)).all()) == 1


def test_delete(auth_client, session):
    batch_id = _create(auth_client)

    assert auth_client.delete(f"/batch/{batch_id}").status_code == 200
    assert auth_client.delete(f"/batch/{batch_id}").status_code == 404

    waste = session.exec(select(StockEvent).where(StockEvent.type == StockEventType.WASTE)).all()
    assert [e.quantity for e in waste] == [2]


def test_other_restaurant_batch_is_not_found(auth_client, session):
    other = provision_restaurant(session, pin="005555", label="E", name="Outro")
    foreign = ProductBatch(restaurant_id=other.id, name="Peixe", quantity=1, expiry_date=date.today())
    session.add(foreign)
    session.commit()
    session.refresh(foreign)

    assert auth_client.delete(f"/batch/{foreign.id}").status_code == 404
    assert auth_client.post(f"/batch/{foreign.id}/adjust", data={"adjustment": "-1"}).status_code == 404
    assert auth_client.put(f"/batch/{foreign.id}", data=_batch_form()).status_code == 404
    assert auth_client.get("/batch/list").json()["total"] == 0


def test_dashboard(auth_client):
    _create(auth_client, name="Iogurte", expiryDate=(date.today() - timedelta(days=2)).isoformat())
    _create(auth_client, name="Arroz", expiryDate=(date.today() + timedelta(days=90)).isoformat())

    body = auth_client.get("/dashboard").json()

    assert body["counts"]["EXPIRED"] == 1
    assert body["counts"]["OK"] == 1
    assert [b["name"] for b in body["expired"]] == ["Iogurte"]
    assert body["expired"][0]["expiry_label"] == "Expirado"
