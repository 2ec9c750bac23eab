from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from src.shared.base import StoreRecord


class SaleRecord(StoreRecord):
    id: str
    vendor_id: Optional[str] = Field(default=None, alias="vendedor_id")
    course_id: Optional[str] = Field(default=None, alias="curso_id")
    student_id: Optional[str] = Field(default=None, alias="aluno_id")
    status: Optional[str] = None
    expected_points: Optional[float] = Field(default=None, alias="pontuacao_esperada")
    validated_points: Optional[float] = Field(default=None, alias="pontuacao_validada")
    submitted_at: Optional[datetime] = Field(default=None, alias="enviado_em")
    updated_at: Optional[datetime] = Field(default=None, alias="atualizado_em")
    # Either a date or a timestamp depending on how the contract was registered.
    contract_signed_at: Optional[str] = Field(default=None, alias="data_assinatura_contrato")
    approved_at: Optional[datetime] = Field(default=None, alias="data_aprovacao")
    notes: Optional[str] = Field(default=None, alias="observacoes")
    pending_reason: Optional[str] = Field(default=None, alias="motivo_pendencia")
    document_path: Optional[str] = Field(default=None, alias="documento_comprobatorio")


class FormResponseRecord(StoreRecord):
    sale_id: str = Field(alias="form_entry_id")
    field_name: Optional[str] = Field(default=None, alias="campo_nome")
    value: Optional[str] = Field(default=None, alias="valor_informado")


class StudentRecord(StoreRecord):
    id: str
    name: Optional[str] = Field(default=None, alias="nome")
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, alias="telefone")
    crmv: Optional[str] = None
    sale_id: Optional[str] = Field(default=None, alias="form_entry_id")
    vendor_id: Optional[str] = Field(default=None, alias="vendedor_id")


class CourseRecord(StoreRecord):
    id: str
    name: Optional[str] = Field(default=None, alias="nome")
    modality: Optional[str] = Field(default=None, alias="modalidade")
    active: Optional[bool] = Field(default=True, alias="ativo")


class ScoringRuleRecord(StoreRecord):
    id: Optional[str] = None
    field_name: str = Field(alias="campo_nome")
    option_value: str = Field(alias="opcao_valor")
    points: float = Field(default=0, alias="pontos")
