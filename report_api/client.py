"""
Client for the reporting API.

Wraps every endpoint for dashboards, notebooks and scripts that consume
the API from Python.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests


class ReportClient:
    """
    Client for the reporting API.

    Usage:
        client = ReportClient("http://localhost:10000")
        client.count_campaigns("Grupo WE")
        client.get_balance("Grupo WE", 2024)
    """

    def __init__(self, api_url: str = "http://localhost:10000", timeout: float = 30):
        """
        Initialize API client.

        Args:
            api_url: Base URL of the API server
            timeout: Seconds to wait for each response
        """
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()

    def _get(self, endpoint: str, params: Dict = None) -> Any:
        """Make GET request to API, dropping filters that are None."""
        url = f"{self.api_url}{endpoint}"
        params = {k: v for k, v in (params or {}).items() if v is not None}
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    # ----------------------------------------------------------------
    # Health
    # ----------------------------------------------------------------

    def health_check(self) -> str:
        """Return the plain-text health message."""
        response = self.session.get(f"{self.api_url}/", timeout=self.timeout)
        response.raise_for_status()
        return response.text

    # ----------------------------------------------------------------
    # Balances & Companies
    # ----------------------------------------------------------------

    def get_balance(self, company: str, year: int) -> Optional[List[Dict]]:
        """
        Get the balance rows of one company in one year.

        Returns:
            List of balance rows, or None when the API answers 404
        """
        try:
            return self._get("/get_balance", {"empresa": company, "ano": year})["data"]
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise

    def get_balances(self) -> List[Dict]:
        return self._get("/balances")["data"]

    def get_companies(self) -> List[Dict]:
        return self._get("/companies")["data"]

    # ----------------------------------------------------------------
    # Campaigns & PR
    # ----------------------------------------------------------------

    def count_campaigns(self, company: Optional[str] = None) -> int:
        return self._get("/campaigns_count", {"company": company})["total"]

    def last_campaign(self, company: Optional[str] = None) -> Optional[Dict]:
        return self._get("/campaigns_last", {"company": company})["item"]

    def last_pr_material(self, company: Optional[str] = None) -> Optional[Dict]:
        return self._get("/pr_materials_last", {"company": company})["item"]

    # ----------------------------------------------------------------
    # Leases
    # ----------------------------------------------------------------

    def max_lease(self, year: int, company: Optional[str] = None) -> Optional[Dict]:
        """Largest monthly lease payment of ``year``."""
        return self._get("/leases_max", {"year": year, "company": company})["item"]

    def monthly_leases(
        self,
        year: Optional[int] = None,
        company: Optional[str] = None
    ) -> List[Dict]:
        return self._get("/leases_monthly", {"year": year, "company": company})["data"]

    def init_all(self) -> Dict[str, List[Dict]]:
        """Companies plus 2024 and 2025 leases, as one dict."""
        return self._get("/init_all")

    # ----------------------------------------------------------------
    # Clients
    # ----------------------------------------------------------------

    def client_revenue(self, company: str, year: Optional[int] = None) -> List[Dict]:
        return self._get("/clients/revenue", {"company": company, "year": year})["data"]

    def top_commission_rate(self, company: str) -> Optional[Dict]:
        return self._get("/clients/top_commission_rate", {"company": company})["item"]

    def most_above_planned(self, company: str, year: Optional[int] = None) -> Optional[Dict]:
        return self._get(
            "/clients/most_above_planned", {"company": company, "year": year}
        )["item"]

    def top_commission_value(self, company: str, year: Optional[int] = None) -> Optional[Dict]:
        return self._get(
            "/clients/top_commission_value", {"company": company, "year": year}
        )["item"]

    # ----------------------------------------------------------------
    # Employees
    # ----------------------------------------------------------------

    def employees_summary(self, company: str) -> Dict:
        return self._get("/employees_summary", {"company": company})

    # ----------------------------------------------------------------
    # Convenience Methods
    # ----------------------------------------------------------------

    def total_revenue(self, company: str, year: int) -> Decimal:
        """Sum of realized client revenue for one year, as an exact Decimal."""
        rows = self.client_revenue(company, year)
        return sum((Decimal(r["faturamento"]) for r in rows if r["faturamento"] is not None),
                   Decimal(0))


if __name__ == "__main__":
    client = ReportClient()
    print(client.health_check())
    companies = client.get_companies()
    print(f"{len(companies)} companies")
    for company in companies[:5]:
        name = company["nome"]
        print(f"  {name}: {client.count_campaigns(name)} campaigns")
