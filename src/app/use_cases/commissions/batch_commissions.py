"""Batch commission calculation use cases

Both sweeps run the strict per-payment calculation sequentially. A failed
payment is logged and skipped; there is no retry.
"""

import logging
from decimal import Decimal
from typing import List
from libs.result import Result, Return, Error
from src.app.repositories.payment_repository import PaymentRepository
from .calculate_commission import CalculateCommissionForPayment
from .dtos import CommissionBatchResultDTO, RecalculateCommissionsCommandDTO

logger = logging.getLogger(__name__)


async def _calculate_all(
    calculator: CalculateCommissionForPayment, payment_ids: List[str]
) -> CommissionBatchResultDTO:
    response = CommissionBatchResultDTO()
    total = Decimal("0.00")

    for payment_id in payment_ids:
        result = await calculator.execute(payment_id)
        if result.is_err():
            response.failed += 1
            response.errors.append(f"{payment_id}: {result.error.code}")
            logger.error(
                f"Failed to calculate commission for payment {payment_id}: {result.error.message}"
            )
            continue

        response.calculations.append(result.value)
        response.processed += 1
        total += result.value.commission_amount

    response.total_commission = total
    return response


class CalculatePendingCommissions:
    """
    Use Case: Calculate commissions for COMPLETED payments without a record
    """

    def __init__(
        self,
        payment_repo: PaymentRepository,
        calculator: CalculateCommissionForPayment,
    ):
        self.payment_repo = payment_repo
        self.calculator = calculator

    async def execute(self) -> Result[CommissionBatchResultDTO]:
        try:
            payments = await self.payment_repo.list_completed_without_commission()
            logger.info(f"Calculating commissions for {len(payments)} payments")

            response = await _calculate_all(self.calculator, [p.id for p in payments])

            logger.info(
                f"Completed {response.processed} commission calculations "
                f"({response.failed} failed), total {response.total_commission}"
            )
            return Return.ok(response)

        except Exception as e:
            logger.error(f"Error calculating pending commissions: {e}")
            return Return.err(
                Error(
                    code="CALCULATE_PENDING_COMMISSIONS_FAILED",
                    message="Failed to calculate pending commissions",
                    reason=str(e),
                )
            )


class RecalculateCommissions:
    """
    Use Case: Re-run the calculation for COMPLETED payments in a window

    Used for corrections after a tier rate changes. Existing records are
    updated in place.
    """

    def __init__(
        self,
        payment_repo: PaymentRepository,
        calculator: CalculateCommissionForPayment,
    ):
        self.payment_repo = payment_repo
        self.calculator = calculator

    async def execute(self, command: RecalculateCommissionsCommandDTO) -> Result[CommissionBatchResultDTO]:
        if command.end_date < command.start_date:
            return Return.err(
                Error(
                    code="INVALID_DATE_RANGE",
                    message="end_date must not be before start_date",
                )
            )

        try:
            payments = await self.payment_repo.list_completed_between(
                command.start_date, command.end_date, institution_id=command.institution_id
            )
            logger.info(f"Recalculating commissions for {len(payments)} payments")

            response = await _calculate_all(self.calculator, [p.id for p in payments])
            return Return.ok(response)

        except Exception as e:
            logger.error(f"Error recalculating commissions: {e}")
            return Return.err(
                Error(
                    code="RECALCULATE_COMMISSIONS_FAILED",
                    message="Failed to recalculate commissions",
                    reason=str(e),
                )
            )
