"""Map loosely-keyed landing-page form posts onto lead rows.

Each logical field lists the payload keys it accepts, in priority order; the
first non-empty value wins and otherwise the field default applies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple


NAME_PLACEHOLDER = "Nome não informado"
DEFAULT_SOURCE = "GreatPages"
DEFAULT_MEDIUM = "form"
NEW_LEAD_STATUS = "novo"
NAME_EXCLUDED_KEY_PARTS = ("email", "phone", "utm", "id", "ip")


@dataclass(frozen=True)
class FieldSpec:
    column: str
    keys: Tuple[str, ...]
    default: Any = None
    headers: Tuple[str, ...] = ()


def lead_field_specs(default_source: str = DEFAULT_SOURCE) -> List[FieldSpec]:
    return [
        FieldSpec(
            "nome",
            ("Nome", "nome", "Name", "NOME", "full_name", "fullName", "firstName",
             "first_name", "cliente", "lead_name"),
            NAME_PLACEHOLDER,
        ),
        FieldSpec(
            "email",
            ("E_mail", "email", "Email", "EMAIL", "e_mail", "mail", "emailAddress",
             "email_address", "E-mail"),
        ),
        FieldSpec(
            "whatsapp",
            ("Seu_WhatsApp", "whatsapp", "phone", "telefone", "WhatsApp", "WHATSAPP",
             "celular", "mobile", "phoneNumber", "phone_number", "Telefone"),
        ),
        FieldSpec(
            "fonte_referencia",
            ("utm_source", "source", "origem", "referrer", "fonte", "campaign_source",
             "Referral_Source"),
            default_source,
        ),
        FieldSpec(
            "dispositivo",
            ("Dispositivo", "device", "dispositivo", "user_agent", "platform", "browser"),
        ),
        FieldSpec(
            "regiao",
            ("Regiao_do_usuario", "Cidade_do_usuario", "Pais_do_usuario", "region", "regiao",
             "location", "cidade", "city", "state", "estado"),
        ),
        FieldSpec(
            "pagina_id",
            ("Id_da_pagina", "page_id", "pagina_id", "form_id", "formId", "Id_do_formulario"),
        ),
        FieldSpec(
            "pagina_nome",
            ("page_name", "pagina_nome", "page_title", "form_name", "formName", "URL"),
        ),
        FieldSpec("utm_source", ("utm_source",), default_source),
        FieldSpec("utm_medium", ("utm_medium",), DEFAULT_MEDIUM),
        FieldSpec("utm_campaign", ("utm_campaign", "campaign")),
        FieldSpec("utm_content", ("utm_content",)),
        FieldSpec("utm_term", ("utm_term",)),
        FieldSpec("fonte_captura", ("utm_source",), default_source),
        FieldSpec(
            "ip_address",
            ("IP_do_usuario", "ip", "ip_address", "client_ip"),
            headers=("x-forwarded-for", "x-real-ip"),
        ),
        FieldSpec("user_agent", ("user_agent",), headers=("user-agent",)),
    ]


def _first_present(source: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = source.get(key)
        if value not in (None, "", False):
            return value
    return None


def _tracking_id(value: Any, placeholder: str) -> Optional[Any]:
    if not value or value == placeholder:
        return None
    return value


def extra_notes(body: Mapping[str, Any]) -> List[str]:
    notes: List[str] = []
    if body.get("Eu_sou"):
        notes.append(f"Profissão/Área: {body['Eu_sou']}")
    if "Politicas_de_privacidade" in body:
        accepted = "Sim" if body["Politicas_de_privacidade"] else "Não"
        notes.append(f"Aceitou Políticas: {accepted}")
    if body.get("Data_da_conversao"):
        notes.append(f"Data Conversão: {body['Data_da_conversao']}")
    fbclid = _tracking_id(body.get("fbclid"), "{fbclid}")
    if fbclid:
        notes.append(f"Facebook Click ID: {fbclid}")
    gclid = _tracking_id(body.get("gclid"), "{gclid}")
    if gclid:
        notes.append(f"Google Click ID: {gclid}")
    return notes


def guess_name(body: Mapping[str, Any], now: Callable[[], datetime]) -> str:
    for key, value in body.items():
        lowered = key.lower()
        if not isinstance(value, str) or not 1 < len(value) < 100:
            continue
        if value.strip() == NAME_PLACEHOLDER:
            continue
        if any(part in lowered for part in NAME_EXCLUDED_KEY_PARTS):
            continue
        return value
    return f"Lead {now().isoformat()}"


def map_lead(
    body: Mapping[str, Any],
    headers: Optional[Mapping[str, str]] = None,
    default_source: str = DEFAULT_SOURCE,
    now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
) -> Dict[str, Any]:
    headers = headers or {}
    lead: Dict[str, Any] = {}
    for spec in lead_field_specs(default_source):
        value = _first_present(body, spec.keys)
        if value is None and spec.headers:
            value = _first_present(headers, spec.headers)
        lead[spec.column] = value if value is not None else spec.default
    lead["status"] = NEW_LEAD_STATUS

    notes = extra_notes(body)
    if notes:
        lead["observacoes"] = "\n".join(notes)
    if not lead["nome"] or lead["nome"] == NAME_PLACEHOLDER:
        lead["nome"] = guess_name(body, now)
    return lead
