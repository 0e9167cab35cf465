"""
Route table for the reporting API.

Every endpoint is one entry: which query-string parameters it takes, how
those parameters become a ``SelectQuery``, and how the resulting rows are
shaped into the response envelope. ``main.py`` registers the table with
FastAPI; nothing here touches HTTP or the database directly.
"""

import asyncio
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from .data_access import QueryResult
from .errors import InvalidParameterError, MissingParameterError, NotFoundError
from .models import (
    BalanceRow,
    CampaignRow,
    ClientPerformanceRow,
    ClientRevenueRow,
    CompanyRow,
    CountResponse,
    EmployeesSummaryResponse,
    InitAllResponse,
    LeaseRow,
    PRMaterialRow,
    data_envelope,
    item_envelope,
)
from .query_builder import Query, SelectQuery

RunQuery = Callable[[Query], Awaitable[QueryResult]]
Params = Dict[str, Any]

_INT_RE = re.compile(r"[+-]?[0-9]{1,9}")


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Param:
    """A query-string parameter; ``aliases`` are accepted in place of ``name``."""
    name: str
    kind: type = str
    aliases: Tuple[str, ...] = ()
    description: str = ""

    @property
    def keys(self) -> Tuple[str, ...]:
        return (self.name,) + self.aliases

    def lookup(self, query_params: Mapping[str, str]) -> Optional[str]:
        """First non-blank value among ``keys``, stripped, or None."""
        for key in self.keys:
            raw = query_params.get(key)
            if raw is not None and raw.strip():
                return raw.strip()
        return None

    def coerce(self, raw: str) -> Any:
        if self.kind is int:
            if not _INT_RE.fullmatch(raw):
                raise InvalidParameterError(self.name)
            return int(raw)
        return raw

    def openapi(self, required: bool) -> dict:
        description = self.description
        if self.aliases:
            description = f"{description} (alias: {', '.join(self.aliases)})".strip()
        return {
            "name": self.name,
            "in": "query",
            "required": required,
            "description": description,
            "schema": {"type": "integer" if self.kind is int else "string"},
        }


COMPANY = Param("company", description="Company name, case-insensitive")
YEAR = Param("year", kind=int, description="Four-digit year")


@dataclass(frozen=True)
class Route:
    """One query, one response shape."""
    path: str
    summary: str
    tag: str
    build: Callable[[Params], Query]
    shape: Callable[[QueryResult, Params], Any]
    required: Tuple[Param, ...] = ()
    optional: Tuple[Param, ...] = ()
    response_model: Optional[type] = None
    missing_hint: Optional[str] = None

    def extract(self, query_params: Mapping[str, str]) -> Params:
        """
        Validate and coerce query-string values.

        Raises:
            MissingParameterError: If any required parameter is absent or blank
            InvalidParameterError: If a value does not parse as its kind
        """
        if any(p.lookup(query_params) is None for p in self.required):
            raise MissingParameterError([p.name for p in self.required], self.missing_hint)

        values: Params = {}
        for p in self.required + self.optional:
            raw = p.lookup(query_params)
            values[p.name] = p.coerce(raw) if raw is not None else None
        return values

    async def execute(self, run_query: RunQuery, params: Params) -> Any:
        result = await run_query(self.build(params))
        return self.shape(result, params)

    def openapi_parameters(self) -> List[dict]:
        return ([p.openapi(True) for p in self.required]
                + [p.openapi(False) for p in self.optional])


@dataclass(frozen=True)
class BatchRoute(Route):
    """
    Several independent queries issued concurrently.

    The response holds every section's rows under its name; if any query
    fails, the whole call fails and no section is returned.
    """
    build: Callable[[Params], Query] = None
    shape: Callable[[QueryResult, Params], Any] = None
    sections: Dict[str, Callable[[Params], Query]] = field(default_factory=dict)

    async def execute(self, run_query: RunQuery, params: Params) -> Any:
        names = list(self.sections)
        results = await asyncio.gather(
            *(run_query(self.sections[name](params)) for name in names)
        )
        return {name: result.rows for name, result in zip(names, results)}


# ---------------------------------------------------------------------------
# Result shapes
# ---------------------------------------------------------------------------

def as_data(result: QueryResult, params: Params) -> dict:
    return {"data": result.rows}


def as_item(result: QueryResult, params: Params) -> dict:
    return {"item": result.first()}


def as_total(result: QueryResult, params: Params) -> dict:
    row = result.first()
    return {"total": int(row["total"]) if row and row.get("total") is not None else 0}


def as_balance(result: QueryResult, params: Params) -> dict:
    if not result.rows:
        raise NotFoundError(
            f"Nenhum balanço encontrado para {params['empresa']} em {params['ano']}."
        )
    return {"data": result.rows}


def as_employee_summary(result: QueryResult, params: Params) -> dict:
    first = result.first()
    return {
        "company": first["company_name"] if first else params["company"],
        "total_funcionarios": len(result.rows),
        "funcionarios": [
            {"name": r["name"], "role": r["role"], "salary": r["salary"]}
            for r in result.rows
        ],
    }


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

BALANCE_COLUMNS = ["b.company_name", "b.year", "b.revenue", "b.ebitda", "b.net_income"]

CAMPAIGN_COLUMNS = [
    "c.id",
    "co.nome AS company_name",
    "c.titulo",
    "c.data_veiculacao",
    "c.valor_investido",
    "c.retorno",
]
CAMPAIGN_SOURCE = "campaigns c JOIN companies co ON co.id = c.company_id"

LEASE_COLUMNS = [
    "l.company_id",
    "co.nome AS company_name",
    "l.year",
    "l.month",
    "l.amount_paid",
    "l.machines_count",
]
LEASE_SOURCE = "leases l JOIN companies co ON co.id = l.company_id"

CLIENT_COLUMNS = [
    "co.nome AS company_name",
    "cp.client_name",
    "cp.year",
    "cp.planned",
    "cp.realized",
    "cp.commission_rate",
    "cp.commission_value",
    "(cp.realized - cp.planned) AS above_planned",
]
CLIENT_SOURCE = "client_performance cp JOIN companies co ON co.id = cp.company_id"

PR_COLUMNS = [
    "pm.id",
    "co.nome AS company_name",
    "pm.title",
    "pm.publish_date",
    "pm.created_at",
    "pm.generated_value",
    "pm.content",
]
PR_SOURCE = "pr_materials pm JOIN companies co ON co.id = pm.company_id"


def _filtered(q: SelectQuery, params: Params, company_col: str, year_col: str = None) -> SelectQuery:
    """Apply the optional company/year filters that are present."""
    if params.get("company") is not None:
        q.where_company(company_col, params["company"])
    if year_col and params.get("year") is not None:
        q.where(f"{year_col} = %s", params["year"])
    return q


def balance_query(params: Params) -> Query:
    return (SelectQuery(BALANCE_COLUMNS, "balances b")
            .where_company("b.company_name", params["empresa"])
            .where("b.year = %s", params["ano"])
            .order_by("b.company_name")
            .build())


def all_balances_query(params: Params) -> Query:
    return (SelectQuery(BALANCE_COLUMNS, "balances b")
            .order_by("b.company_name", "b.year")
            .build())


def campaigns_count_query(params: Params) -> Query:
    q = SelectQuery(["COUNT(*)::int AS total"], CAMPAIGN_SOURCE)
    return _filtered(q, params, "co.nome").build()


def campaigns_last_query(params: Params) -> Query:
    q = SelectQuery(CAMPAIGN_COLUMNS, CAMPAIGN_SOURCE)
    return (_filtered(q, params, "co.nome")
            .order_by("c.data_veiculacao DESC NULLS LAST", "c.id DESC")
            .limit(1)
            .build())


def companies_query(params: Params) -> Query:
    return (SelectQuery(["id", "nome", "area", "descricao"], "companies")
            .order_by("id")
            .build())


def leases_max_query(params: Params) -> Query:
    # Ties on amount: latest month first, then lowest company id.
    q = SelectQuery(LEASE_COLUMNS, LEASE_SOURCE)
    return (_filtered(q, params, "co.nome", "l.year")
            .order_by("l.amount_paid DESC NULLS LAST", "l.month DESC", "l.company_id ASC")
            .limit(1)
            .build())


def leases_monthly_query(params: Params) -> Query:
    q = SelectQuery(LEASE_COLUMNS, LEASE_SOURCE)
    return (_filtered(q, params, "co.nome", "l.year")
            .order_by("co.nome", "l.year", "l.month")
            .build())


def leases_for_year(year: int) -> Callable[[Params], Query]:
    def build(params: Params) -> Query:
        return leases_monthly_query({"year": year, "company": None})
    return build


def client_revenue_query(params: Params) -> Query:
    q = SelectQuery(["cp.year", "SUM(cp.realized) AS faturamento"], CLIENT_SOURCE)
    return (_filtered(q, params, "co.nome", "cp.year")
            .group_by("cp.year")
            .order_by("cp.year")
            .build())


def top_client_query(ranking: str) -> Callable[[Params], Query]:
    """Best client of the company by ``ranking``; newest year, then client name, break ties."""
    def build(params: Params) -> Query:
        q = SelectQuery(CLIENT_COLUMNS, CLIENT_SOURCE)
        return (_filtered(q, params, "co.nome", "cp.year")
                .top_per_group(
                    "cp.company_id",
                    f"{ranking} DESC NULLS LAST, cp.year DESC, cp.client_name ASC",
                )
                .order_by("company_name")
                .build())
    return build


def pr_materials_last_query(params: Params) -> Query:
    q = SelectQuery(PR_COLUMNS, PR_SOURCE)
    return (_filtered(q, params, "co.nome")
            .order_by("pm.publish_date DESC NULLS LAST", "pm.created_at DESC NULLS LAST", "pm.id DESC")
            .limit(1)
            .build())


def employees_query(params: Params) -> Query:
    q = SelectQuery(
        ["co.nome AS company_name", "e.name", "e.role", "e.salary"],
        "employees e JOIN companies co ON co.id = e.company_id",
    )
    return _filtered(q, params, "co.nome").order_by("e.name").build()


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

ROUTES: List[Route] = [
    Route(
        path="/get_balance",
        summary="Balance of one company in one year",
        tag="Balances",
        build=balance_query,
        shape=as_balance,
        required=(
            Param("empresa", aliases=("company",), description="Company name, case-insensitive"),
            Param("ano", kind=int, description="Four-digit year"),
        ),
        response_model=data_envelope(BalanceRow),
        missing_hint="Informe ?empresa=Nome&ano=2024",
    ),
    Route(
        path="/balances",
        summary="All balances",
        tag="Balances",
        build=all_balances_query,
        shape=as_data,
        response_model=data_envelope(BalanceRow),
    ),
    Route(
        path="/campaigns_count",
        summary="Number of campaigns, optionally for one company",
        tag="Campaigns",
        build=campaigns_count_query,
        shape=as_total,
        optional=(COMPANY,),
        response_model=CountResponse,
    ),
    Route(
        path="/campaigns_last",
        summary="Most recent campaign, optionally for one company",
        tag="Campaigns",
        build=campaigns_last_query,
        shape=as_item,
        optional=(COMPANY,),
        response_model=item_envelope(CampaignRow),
    ),
    Route(
        path="/companies",
        summary="All companies",
        tag="Companies",
        build=companies_query,
        shape=as_data,
        response_model=data_envelope(CompanyRow),
    ),
    Route(
        path="/leases_max",
        summary="Largest monthly lease payment of a year",
        tag="Leases",
        build=leases_max_query,
        shape=as_item,
        required=(YEAR,),
        optional=(COMPANY,),
        response_model=item_envelope(LeaseRow),
    ),
    Route(
        path="/leases_monthly",
        summary="Monthly lease records",
        tag="Leases",
        build=leases_monthly_query,
        shape=as_data,
        optional=(YEAR, COMPANY),
        response_model=data_envelope(LeaseRow),
    ),
    BatchRoute(
        path="/init_all",
        summary="Companies plus 2024 and 2025 leases in one call",
        tag="Dashboard",
        sections={
            "companies": companies_query,
            "leases_2024": leases_for_year(2024),
            "leases_2025": leases_for_year(2025),
        },
        response_model=InitAllResponse,
    ),
    Route(
        path="/clients/revenue",
        summary="Realized client revenue per year",
        tag="Clients",
        build=client_revenue_query,
        shape=as_data,
        required=(COMPANY,),
        optional=(YEAR,),
        response_model=data_envelope(ClientRevenueRow),
    ),
    Route(
        path="/clients/top_commission_rate",
        summary="Client with the highest commission rate",
        tag="Clients",
        build=top_client_query("cp.commission_rate"),
        shape=as_item,
        required=(COMPANY,),
        response_model=item_envelope(ClientPerformanceRow),
    ),
    Route(
        path="/clients/most_above_planned",
        summary="Client whose realized revenue most exceeded plan",
        tag="Clients",
        build=top_client_query("(cp.realized - cp.planned)"),
        shape=as_item,
        required=(COMPANY,),
        optional=(YEAR,),
        response_model=item_envelope(ClientPerformanceRow),
    ),
    Route(
        path="/clients/top_commission_value",
        summary="Client with the highest commission value",
        tag="Clients",
        build=top_client_query("cp.commission_value"),
        shape=as_item,
        required=(COMPANY,),
        optional=(YEAR,),
        response_model=item_envelope(ClientPerformanceRow),
    ),
    Route(
        path="/pr_materials_last",
        summary="Most recent PR material, optionally for one company",
        tag="PR",
        build=pr_materials_last_query,
        shape=as_item,
        optional=(COMPANY,),
        response_model=item_envelope(PRMaterialRow),
    ),
    Route(
        path="/employees_summary",
        summary="Employee roster of one company",
        tag="Employees",
        build=employees_query,
        shape=as_employee_summary,
        required=(COMPANY,),
        response_model=EmployeesSummaryResponse,
    ),
]
