# ==============================================================================
# BALANCE SERVICE - Pay From Account Balance
# ==============================================================================
# Reserve the order, debit the balance, record the purchase and complete,
# all in one transaction
# ==============================================================================

from __future__ import annotations

import logging
from typing import Optional

from licensestore.core.constants import ErrorMessages
from licensestore.core.exceptions import (
    BadRequestError,
    InsufficientFundsError,
    NotFoundError,
)
from licensestore.database.adapters.base_adapter import BaseDatabaseAdapter
from licensestore.domain_models.order import OrderStatus, PaymentMethod
from licensestore.domain_models.transaction import TransactionType
from licensestore.schemas.checkout import BalancePaymentResult
from licensestore.services.base_service import BaseService
from licensestore.services.completion_service import OrderCompletionService

logger = logging.getLogger(__name__)


class BalancePaymentService(BaseService):
    """Balance payment flow composed with order completion."""

    def __init__(
        self,
        adapter: Optional[BaseDatabaseAdapter] = None,
        completion_service: Optional[OrderCompletionService] = None,
    ) -> None:
        super().__init__(adapter)
        self._completion = completion_service or OrderCompletionService(adapter)

    async def pay(self, user_id: str, order_id: str) -> BalancePaymentResult:
        """
        Pay a BALANCE order from the user's balance and complete it.

        Any failure rolls back every step, including the debit.

        Raises:
            NotFoundError: Unknown order
            BadRequestError: Not the owner, wrong payment method, or the
                order is already being processed or completed
            InsufficientFundsError: Balance below the order total
        """
        async with self.unit_of_work() as uow:
            order = await uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(
                    ErrorMessages.ORDER_NOT_FOUND,
                    resource_type="order",
                    resource_id=order_id,
                )
            if order.user_id != user_id:
                raise BadRequestError(ErrorMessages.ORDER_FORBIDDEN)
            if order.payment_method != PaymentMethod.BALANCE:
                raise BadRequestError(ErrorMessages.ORDER_NOT_BALANCE)

            reserved = await uow.orders.transition(
                order_id,
                [OrderStatus.PENDING],
                OrderStatus.PROCESSING,
            )
            if not reserved:
                logger.warning(f"Balance payment rejected for order {order_id}: not pending")
                raise BadRequestError(ErrorMessages.ORDER_ALREADY_PROCESSING)

            total = order.total
            if not await uow.users.debit_balance(user_id, total):
                logger.warning(f"Balance payment rejected for order {order_id}: insufficient balance")
                raise InsufficientFundsError(
                    ErrorMessages.INSUFFICIENT_BALANCE,
                    required_amount=float(total),
                )

            await uow.transactions.append(
                user_id=user_id,
                type=TransactionType.PURCHASE,
                amount=total,
                payment_method=PaymentMethod.BALANCE.value,
                payment_ref=order_id,
                description=f"Balance payment for order {order_id}",
            )

            completed = await self._completion.complete_order(order_id, uow=uow)

        logger.info(f"Order {order_id} paid from balance by user {user_id}: {total}")
        return BalancePaymentResult(success=True, order_id=order_id, order=completed)
