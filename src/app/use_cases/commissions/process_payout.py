"""ProcessCommissionPayout Use Case"""

import logging
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.commission_repository import CommissionRepository
from src.domain.commission import InstitutionPayout, PayoutStatus
from src.domain.policy import GovernancePolicy
from .dtos import PayoutCommandDTO, PayoutResponseDTO

logger = logging.getLogger(__name__)


class ProcessCommissionPayout:
    """
    Use Case: Pay out an institution's pending commissions

    Business Rules:
    1. At least one PENDING commission must exist
    2. amount must not exceed the sum of PENDING commissions
    3. On success every PENDING commission of the institution is marked PAID
       and stamped with the payout id, even when amount is below the total
    4. Pending rows are locked for the duration of the sweep

    Flow:
    1. Lock pending commissions
    2. Validate amount
    3. Create payout (PROCESSING) and mark commissions PAID
    4. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        commission_repo: CommissionRepository,
        policy: GovernancePolicy,
    ):
        self.uow = uow
        self.commission_repo = commission_repo
        self.policy = policy

    async def execute(self, command: PayoutCommandDTO) -> Result[PayoutResponseDTO]:
        try:
            # Step 1: Lock pending commissions
            pending = await self.commission_repo.list_pending(command.institution_id, for_update=True)
            if not pending:
                return Return.err(
                    Error(
                        code="NO_PENDING_COMMISSIONS",
                        message=f"No pending commissions found for institution {command.institution_id}",
                    )
                )

            # Step 2: Validate amount
            pending_total = sum((Decimal(c.amount) for c in pending), Decimal("0.00"))
            if command.amount > pending_total:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="PAYOUT_EXCEEDS_PENDING",
                        message="Payout amount exceeds pending commission amount",
                        reason=f"requested={command.amount}, pending={pending_total}",
                    )
                )

            # Step 3: Payout and sweep
            commission_ids = [c.id for c in pending]
            payout = await self.commission_repo.create_payout(
                InstitutionPayout(
                    institution_id=command.institution_id,
                    amount=command.amount,
                    currency=self.policy.currency,
                    status=PayoutStatus.PROCESSING,
                    payout_method=command.payout_method,
                    reference=command.reference,
                )
            )
            paid = await self.commission_repo.mark_paid(commission_ids, payout.id)

            # Step 4: Commit
            await self.uow.commit()

            logger.info(
                f"Payout {payout.id} of {command.amount} created for institution "
                f"{command.institution_id} covering {paid} commissions"
            )

            return Return.ok(
                PayoutResponseDTO(
                    payout_id=payout.id,
                    institution_id=payout.institution_id,
                    amount=payout.amount,
                    currency=payout.currency,
                    status=payout.status.value,
                    payout_method=payout.payout_method,
                    reference=payout.reference,
                    commissions_paid=paid,
                    pending_total=pending_total,
                    created_at=payout.created_at,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Error processing payout for institution {command.institution_id}: {e}")
            return Return.err(
                Error(
                    code="PAYOUT_FAILED",
                    message="Failed to process commission payout",
                    reason=str(e),
                )
            )
