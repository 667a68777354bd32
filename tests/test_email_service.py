import resend

from clearstock.model.support_message import SupportType
from clearstock.services import email_service


def test_without_api_key_only_logs(settings, monkeypatch):
    def fail(params):
        raise AssertionError("não deveria enviar")

    monkeypatch.setattr(resend.Emails, "send", fail)
    settings.resend_api_key = None

    ok, error = email_service.send_support_email(None, "001111", SupportType.BUG, "Erro", "a@b.pt", settings)

    assert ok is False
    assert "RESEND_API_KEY" in error


def test_sends_to_admin(settings, monkeypatch):
    sent = []

    def fake_send(params):
        sent.append(params)
        return {"id": "email-1"}

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    settings.resend_api_key = "re_test"

    ok, error = email_service.send_support_email(
        "Tasca do Zé", "001111", SupportType.SUGGESTION, "Modo escuro", "912345678", settings
    )

    assert (ok, error) == (True, "")
    params = sent[0]
    assert params["to"] == [settings.support_admin_email]
    assert params["from"] == settings.email_from
    assert params["subject"] == "Novo pedido de suporte - Tasca do Zé"
    assert "Tipo: Sugestão" in params["text"]
    assert "Modo escuro" in params["text"]


def test_subject_falls_back_to_pin(settings, monkeypatch):
    sent = []
    monkeypatch.setattr(resend.Emails, "send", lambda params: sent.append(params) or {"id": "x"})
    settings.resend_api_key = "re_test"

    email_service.send_support_email(None, "001111", SupportType.OTHER, "Olá", "a@b.pt", settings)

    assert sent[0]["subject"] == "Novo pedido de suporte - PIN 001111"


def test_api_key_is_redacted_from_errors(settings, monkeypatch):
    def boom(params):
        raise RuntimeError("401 unauthorized for key re_secret")

    monkeypatch.setattr(resend.Emails, "send", boom)
    settings.resend_api_key = "re_secret"

    ok, error = email_service.send_support_email(None, "001111", SupportType.BUG, "x", "y", settings)

    assert ok is False
    assert "re_secret" not in error
