# billing/services/hsn.py

"""
HSN/SAC SUMMARY

One row per literal hsn_sac string in first-seen order, then a Total row.
Codes are compared exactly: "8708" and "8708 " are different groups.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from billing.services.tax import ZERO

TOTAL_LABEL = "Total"


@dataclass
class HsnSummaryRow:
    code: str
    taxable_sum: Decimal = ZERO
    cgst_sum: Decimal = ZERO
    sgst_sum: Decimal = ZERO
    is_total: bool = False

    @property
    def total_tax_sum(self) -> Decimal:
        return self.cgst_sum + self.sgst_sum

    def add(self, line):
        self.taxable_sum += Decimal(line.taxable_value)
        self.cgst_sum += Decimal(line.cgst_amount)
        self.sgst_sum += Decimal(line.sgst_amount)

    def as_dict(self) -> dict:
        return {
            "hsn_sac": self.code,
            "taxable_value": self.taxable_sum,
            "cgst_amount": self.cgst_sum,
            "sgst_amount": self.sgst_sum,
            "total_tax": self.total_tax_sum,
            "is_total": self.is_total,
        }


def group_by_hsn(lines) -> list[HsnSummaryRow]:
    groups: dict[str, HsnSummaryRow] = {}
    total = HsnSummaryRow(code=TOTAL_LABEL, is_total=True)

    for line in lines:
        code = line.hsn_sac
        if code not in groups:
            groups[code] = HsnSummaryRow(code=code)
        groups[code].add(line)
        total.add(line)

    return [*groups.values(), total]
