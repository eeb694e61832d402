# ==============================================================================
# PROMO SERVICE - Promo Code Ledger
# ==============================================================================
# Read-only preview, in-transaction reservation of a usage slot and the
# per-user redemption record written at completion
# ==============================================================================

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from licensestore.core.constants import ErrorMessages
from licensestore.core.exceptions import NotFoundError, PromoCodeRejectedError
from licensestore.database.repositories.promo_code_repository import PromoCodeRepository
from licensestore.database.unit_of_work.uow import UnitOfWork
from licensestore.domain_models.promo_code import DiscountType, PromoCode
from licensestore.schemas.promo import PromoPreview
from licensestore.services.base_service import BaseService
from licensestore.utils.helpers import as_utc, round_money, to_decimal, utc_now

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def compute_discount(promo: PromoCode, cart_total: Decimal) -> Decimal:
    """
    Discount a promo code grants on ``cart_total``.

    PERCENTAGE codes take ``value`` percent rounded to cents, capped at
    ``max_discount``. FIXED codes take ``value``.
    """
    value = to_decimal(promo.discount)
    if promo.type == DiscountType.FIXED:
        return round_money(value)

    discount = round_money(to_decimal(cart_total) * value / 100)
    if promo.max_discount is not None:
        discount = min(discount, to_decimal(promo.max_discount))
    return round_money(discount)


class PromoCodeService(BaseService):
    """
    Promo code ledger.

    ``preview`` is advisory and runs in its own read transaction.
    ``reserve`` and ``record_usage`` run inside the caller's unit of work
    so their effects commit or roll back with the order they belong to.
    """

    # ==========================================================================
    # RULES
    # ==========================================================================

    async def _check(
        self,
        repo: PromoCodeRepository,
        code: str,
        user_id: Optional[str],
        cart_total: Optional[Decimal],
    ) -> PromoCode:
        """
        Apply the redemption rules in order.

        Raises:
            NotFoundError: Unknown code
            PromoCodeRejectedError: First rule the code violates
        """
        promo = await repo.get_by_code(code)
        if promo is None:
            raise NotFoundError(
                ErrorMessages.PROMO_NOT_FOUND,
                resource_type="promo_code",
                resource_id=normalize_code(code),
            )
        if not promo.is_active:
            raise PromoCodeRejectedError(ErrorMessages.PROMO_INACTIVE, "inactive")

        expires_at = as_utc(promo.expires_at)
        if expires_at is not None and expires_at < utc_now():
            raise PromoCodeRejectedError(ErrorMessages.PROMO_EXPIRED, "expired")

        if promo.usage_limit is not None and promo.used_count >= promo.usage_limit:
            raise PromoCodeRejectedError(ErrorMessages.PROMO_EXHAUSTED, "exhausted")

        if user_id and await repo.has_usage(user_id, promo.id):
            raise PromoCodeRejectedError(ErrorMessages.PROMO_ALREADY_USED, "already_used")

        if cart_total is not None and promo.min_purchase is not None:
            if to_decimal(cart_total) < to_decimal(promo.min_purchase):
                raise PromoCodeRejectedError(
                    ErrorMessages.PROMO_MIN_PURCHASE.format(amount=promo.min_purchase),
                    "min_purchase",
                )
        return promo

    # ==========================================================================
    # OPERATIONS
    # ==========================================================================

    async def preview(
        self,
        code: str,
        cart_total: Decimal,
        user_id: Optional[str] = None,
    ) -> PromoPreview:
        """
        Check a code against a cart total without changing anything.

        Args:
            code: Code as typed by the user (case-insensitive)
            cart_total: Cart subtotal the discount applies to
            user_id: When given, a prior redemption by this user rejects

        Returns:
            Preview with the computed discount
        """
        async with self.unit_of_work() as uow:
            promo = await self._check(uow.promo_codes, code, user_id, cart_total)

        discount = compute_discount(promo, cart_total)
        return PromoPreview(
            valid=True,
            code=promo.code,
            promo_code_id=promo.id,
            type=promo.type,
            discount_value=to_decimal(promo.discount),
            computed_discount=discount,
            message=f"Promo code applied: -{discount}",
        )

    async def reserve(
        self,
        uow: UnitOfWork,
        code: str,
        user_id: str,
        cart_total: Optional[Decimal] = None,
    ) -> PromoCode:
        """
        Claim one usage slot inside the caller's transaction.

        Every rule is re-checked against this transaction's view, then the
        guarded increment decides. No retries.

        Raises:
            PromoCodeRejectedError: A rule fails or no slot is left
        """
        promo = await self._check(uow.promo_codes, code, user_id, cart_total)
        if not await uow.promo_codes.try_reserve(promo.id):
            logger.warning(f"Promo code {promo.code} exhausted during reservation")
            raise PromoCodeRejectedError(ErrorMessages.PROMO_EXHAUSTED, "exhausted")
        return promo

    async def record_usage(
        self,
        uow: UnitOfWork,
        user_id: str,
        promo_code_id: str,
        order_id: Optional[str] = None,
    ) -> None:
        """
        Insert the (user, code) redemption row.

        Raises:
            PromoCodeRejectedError: The user already redeemed this code
        """
        if not await uow.promo_codes.add_usage(user_id, promo_code_id, order_id):
            raise PromoCodeRejectedError(ErrorMessages.PROMO_ALREADY_USED, "already_used")
