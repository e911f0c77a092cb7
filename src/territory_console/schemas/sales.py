"""Sales rollup API schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from ..services.sales.aggregator import SalesRollup, business_unit_name


class BusinessUnitAmountModel(BaseModel):
    category: str
    name: str
    amount: float


class BusinessUnitChangeModel(BaseModel):
    category: str
    name: str
    revenuePriorYTD: float
    revenueCurrentYTD: float
    changePercent: float


class SalesRollupModel(BaseModel):
    key: str
    name: str
    territory: Optional[str] = None
    accountNumber: Optional[str] = None
    classification: Optional[str] = None
    revenueCurrentYTD: float
    revenuePriorYTD: float
    revenuePriorFULL: float
    change: float
    changePercent: float
    customerCount: int
    businessUnits: List[BusinessUnitAmountModel]
    businessUnitChanges: List[BusinessUnitChangeModel]

    @classmethod
    def from_rollup(cls, rollup: SalesRollup) -> "SalesRollupModel":
        return cls(
            key=rollup.key,
            name=rollup.name,
            territory=rollup.territory,
            accountNumber=rollup.account_number,
            classification=rollup.classification,
            revenueCurrentYTD=rollup.revenue_current_ytd,
            revenuePriorYTD=rollup.revenue_prior_ytd,
            revenuePriorFULL=rollup.revenue_prior_full,
            change=rollup.change,
            changePercent=rollup.change_percent,
            customerCount=rollup.customer_count,
            businessUnits=[
                BusinessUnitAmountModel(category=category, name=business_unit_name(category), amount=amount)
                for category, amount in rollup.business_unit_breakdown()
            ],
            businessUnitChanges=[
                BusinessUnitChangeModel(
                    category=unit.category,
                    name=business_unit_name(unit.category),
                    revenuePriorYTD=unit.revenue_prior_ytd,
                    revenueCurrentYTD=unit.revenue_current_ytd,
                    changePercent=unit.change_percent,
                )
                for unit in sorted(
                    rollup.business_unit_changes.values(),
                    key=lambda unit: unit.revenue_current_ytd,
                    reverse=True,
                )
            ],
        )


class TerritoryDashboardResponse(BaseModel):
    currentYear: int
    priorYear: int
    territories: List[SalesRollupModel]
    totals: SalesRollupModel
    territoryCount: int


class TopAccountsResponse(BaseModel):
    currentYear: int
    priorYear: int
    accounts: List[SalesRollupModel]
