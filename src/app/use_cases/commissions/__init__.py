"""Commission engine use cases"""
from .calculate_commission import CalculateCommissionForPayment
from .batch_commissions import CalculatePendingCommissions, RecalculateCommissions
from .process_payout import ProcessCommissionPayout
from .get_commission_rate import GetCommissionRate
from .commission_reports import (
    GetCommissionSummary,
    GetCommissionAnalytics,
    GenerateDailyCommissionReport,
)
from .dtos import (
    CommissionCalculationDTO,
    CommissionBatchResultDTO,
    RecalculateCommissionsCommandDTO,
    PayoutCommandDTO,
    PayoutResponseDTO,
    CommissionRateDTO,
    CommissionSummaryDTO,
    CommissionTotalDTO,
    TopInstitutionDTO,
    CommissionAnalyticsDTO,
    DailyInstitutionCommissionDTO,
    DailyCommissionReportDTO,
)

__all__ = [
    "CalculateCommissionForPayment",
    "CalculatePendingCommissions",
    "RecalculateCommissions",
    "ProcessCommissionPayout",
    "GetCommissionRate",
    "GetCommissionSummary",
    "GetCommissionAnalytics",
    "GenerateDailyCommissionReport",
    "CommissionCalculationDTO",
    "CommissionBatchResultDTO",
    "RecalculateCommissionsCommandDTO",
    "PayoutCommandDTO",
    "PayoutResponseDTO",
    "CommissionRateDTO",
    "CommissionSummaryDTO",
    "CommissionTotalDTO",
    "TopInstitutionDTO",
    "CommissionAnalyticsDTO",
    "DailyInstitutionCommissionDTO",
    "DailyCommissionReportDTO",
]
