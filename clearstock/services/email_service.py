"""
Envio de emails de suporte usando Resend.
Sem RESEND_API_KEY (desenvolvimento) o pedido é apenas logado.
"""
import logging
from typing import Optional, Tuple

import resend

from clearstock.config import Settings, get_settings
from clearstock.model.support_message import SupportType

logger = logging.getLogger(__name__)

TYPE_LABELS = {
    SupportType.BUG: "Problema / bug",
    SupportType.SUGGESTION: "Sugestão",
    SupportType.QUESTION: "Dúvida",
    SupportType.OTHER: "Outro",
}


def restaurant_display(restaurant_name: Optional[str], restaurant_pin: str) -> str:
    return restaurant_name or f"PIN {restaurant_pin}"


def _get_support_email_text(
    restaurant_name: Optional[str],
    restaurant_pin: str,
    support_type: SupportType,
    message: str,
    contact: str,
) -> str:
    """
    Gera o corpo (texto simples) do email de suporte.
    """
    return f"""
Novo pedido de suporte da Clearstok:

Restaurante: {restaurant_display(restaurant_name, restaurant_pin)}
PIN: {restaurant_pin}
Tipo: {TYPE_LABELS[support_type]}
Contacto: {contact}

Mensagem:

{message}
    """.strip()


def _friendly_error(error_msg_raw: str) -> str:
    lowered = error_msg_raw.lower()
    if "domain" in lowered and ("not verified" in lowered or "unverified" in lowered):
        return "Domínio de email não está verificado no Resend. Adicione e verifique o domínio em https://resend.com/domains"
    if "unauthorized" in lowered or "401" in error_msg_raw:
        return "Chave de API do Resend inválida ou expirada. Verifique RESEND_API_KEY."
    if "rate limit" in lowered or "quota" in lowered:
        return "Limite de envio de emails excedido. Tente novamente mais tarde."
    return f"Erro ao enviar email: {error_msg_raw[:100]}"


def send_support_email(
    restaurant_name: Optional[str],
    restaurant_pin: str,
    support_type: SupportType,
    message: str,
    contact: str,
    settings: Optional[Settings] = None,
) -> Tuple[bool, str]:
    """
    Envia o pedido de suporte para o email do admin.

    Returns:
        Tupla (success, error_message); error_message vazio em caso de sucesso.
        Nunca levanta: o pedido de suporte já foi gravado e o email é best-effort.
    """
    settings = settings or get_settings()
    to_email = settings.support_admin_email
    subject = f"Novo pedido de suporte - {restaurant_display(restaurant_name, restaurant_pin)}"
    text_body = _get_support_email_text(restaurant_name, restaurant_pin, support_type, message, contact)

    if not settings.resend_api_key:
        error_msg = "Chave de API do Resend não configurada. Configure RESEND_API_KEY no ambiente."
        logger.warning(f"[EMAIL] {error_msg} Pedido de suporte apenas logado: {subject}")
        logger.info(f"[EMAIL] Conteúdo do pedido:\n{text_body}")
        return False, error_msg

    resend.api_key = settings.resend_api_key

    try:
        email_response = resend.Emails.send(
            {
                "from": settings.email_from,
                "to": [to_email],
                "subject": subject,
                "text": text_body,
            }
        )
    except Exception as resend_error:
        # Remover possíveis vazamentos de API key
        error_msg_raw = str(resend_error).replace(settings.resend_api_key, "***REDACTED***")
        logger.error(
            f"[EMAIL] ❌ FALHA - Erro ao enviar email de suporte via Resend para {to_email}: {error_msg_raw}",
            exc_info=True,
        )
        return False, _friendly_error(error_msg_raw)

    # Resend retorna dict com 'id' (ou objeto com atributo id)
    email_id = None
    if isinstance(email_response, dict):
        email_id = email_response.get("id")
    elif email_response is not None:
        email_id = getattr(email_response, "id", None)

    if email_id:
        logger.info(f"[EMAIL] Email de suporte enviado para {to_email} (id={email_id})")
        return True, ""

    error_msg = f"Resposta inesperada do serviço de email: {email_response}"
    logger.error(f"[EMAIL] ❌ FALHA - {error_msg} para {to_email}")
    return False, error_msg
