import resend
from sqlmodel import select

from clearstock.model.support_message import SupportMessage, SupportType


def _payload(**overrides):
    payload = {"type": "bug", "message": "O leitor não abre", "contact": "ze@tasca.pt"}
    payload.update(overrides)
    return payload


def test_support_requires_authentication(client):
    assert client.post("/support", json=_payload()).status_code == 401


def test_support_validation_messages(auth_client):
    cases = [
        (_payload(type="complaint"), "Tipo de mensagem inválido"),
        (_payload(message="   "), "Mensagem é obrigatória"),
        (_payload(contact=None), "Contacto é obrigatório"),
    ]
    for payload, error in cases:
        response = auth_client.post("/support", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == error


def test_support_rejects_other_restaurant(auth_client, restaurant):
    response = auth_client.post("/support", json=_payload(restaurant_id=restaurant.id + 1))
    assert response.status_code == 403


def test_support_saved_without_email_key(auth_client, session, restaurant):
    response = auth_client.post("/support", json=_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["email_sent"] is False

    saved = session.exec(select(SupportMessage)).one()
    assert saved.id == body["id"]
    assert saved.restaurant_id == restaurant.id
    assert saved.restaurant_name == "Tasca do Zé"
    assert saved.type == SupportType.BUG


def test_support_sends_email(auth_client, settings, monkeypatch):
    sent = []

    def fake_send(params):
        sent.append(params)
        return {"id": "email-1"}

    settings.resend_api_key = "re_test"
    settings.support_admin_email = "admin@clearstock.test"
    monkeypatch.setattr(resend.Emails, "send", fake_send)

    response = auth_client.post("/support", json=_payload(type="question"))

    assert response.status_code == 201
    assert response.json()["email_sent"] is True
    assert sent[0]["to"] == ["admin@clearstock.test"]
    assert sent[0]["subject"] == "Novo pedido de suporte - Tasca do Zé"
    assert "Tipo: Dúvida" in sent[0]["text"]
