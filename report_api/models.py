"""
Pydantic models for API responses.
Auto-generates OpenAPI documentation and builds the error envelope.

Monetary fields are typed ``str``: NUMERIC values travel as exact decimal
strings, never as floats.
"""

from functools import lru_cache

from pydantic import BaseModel, create_model
from typing import List, Optional


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------

class CompanyRow(BaseModel):
    id: int
    nome: str
    area: Optional[str] = None
    descricao: Optional[str] = None


class BalanceRow(BaseModel):
    company_name: str
    year: int
    revenue: Optional[str] = None
    ebitda: Optional[str] = None
    net_income: Optional[str] = None


class CampaignRow(BaseModel):
    id: int
    company_name: str
    titulo: Optional[str] = None
    data_veiculacao: Optional[str] = None
    valor_investido: Optional[str] = None
    retorno: Optional[str] = None


class LeaseRow(BaseModel):
    company_id: int
    company_name: str
    year: int
    month: int
    amount_paid: Optional[str] = None
    machines_count: Optional[int] = None


class ClientRevenueRow(BaseModel):
    year: int
    faturamento: Optional[str] = None


class ClientPerformanceRow(BaseModel):
    company_name: str
    client_name: str
    year: int
    planned: Optional[str] = None
    realized: Optional[str] = None
    commission_rate: Optional[str] = None
    commission_value: Optional[str] = None
    above_planned: Optional[str] = None


class PRMaterialRow(BaseModel):
    id: int
    company_name: str
    title: Optional[str] = None
    publish_date: Optional[str] = None
    created_at: Optional[str] = None
    generated_value: Optional[str] = None
    content: Optional[str] = None


class EmployeeRow(BaseModel):
    name: str
    role: Optional[str] = None
    salary: Optional[str] = None


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

class CountResponse(BaseModel):
    """Row count response."""
    total: int


class InitAllResponse(BaseModel):
    """Dashboard bootstrap response."""
    companies: List[CompanyRow]
    leases_2024: List[LeaseRow]
    leases_2025: List[LeaseRow]


class EmployeesSummaryResponse(BaseModel):
    """Employee roster for one company."""
    company: str
    total_funcionarios: int
    funcionarios: List[EmployeeRow]


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Error response."""
    error: ErrorDetail

    @classmethod
    def build(cls, code: str, message: str) -> dict:
        return cls(error=ErrorDetail(code=code, message=message)).model_dump()


@lru_cache(maxsize=None)
def data_envelope(row_model: type) -> type:
    """``{"data": [row_model]}`` response model, named after the row type."""
    return create_model(
        row_model.__name__.replace("Row", "") + "ListResponse",
        data=(List[row_model], ...),
    )


@lru_cache(maxsize=None)
def item_envelope(row_model: type) -> type:
    """``{"item": row_model | null}`` response model, named after the row type."""
    return create_model(
        row_model.__name__.replace("Row", "") + "ItemResponse",
        item=(Optional[row_model], None),
    )
