# ==============================================================================
# LICENSE SERVICE - License Key Issuance
# ==============================================================================

from __future__ import annotations

import logging
import re
import secrets
from typing import Optional

from licensestore.core.constants import LicenseConstants
from licensestore.core.exceptions import TransactionError
from licensestore.core.settings import settings
from licensestore.database.unit_of_work.uow import UnitOfWork
from licensestore.domain_models.license import License, LicenseStatus

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(LicenseConstants.KEY_PATTERN)


def generate_license_key() -> str:
    """Random key of the form XXXX-XXXX-XXXX-XXXX over [0-9A-Z]."""
    groups = (
        "".join(
            secrets.choice(LicenseConstants.ALPHABET)
            for _ in range(LicenseConstants.GROUP_LENGTH)
        )
        for _ in range(LicenseConstants.KEY_GROUPS)
    )
    return LicenseConstants.SEPARATOR.join(groups)


def validate_license_key_format(key: str) -> bool:
    return bool(_KEY_RE.match(key or ""))


class LicenseService:
    """
    Issues license rows inside an order-completion transaction.

    Each insert runs in a savepoint; a key collision rolls back only the
    savepoint and retries with a fresh key.
    """

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        key_generator=generate_license_key,
    ) -> None:
        self._max_attempts = max_attempts or settings.LICENSE_KEY_MAX_ATTEMPTS
        self._generate = key_generator

    async def issue(
        self,
        uow: UnitOfWork,
        user_id: str,
        product_id: str,
        order_id: Optional[str],
    ) -> License:
        """
        Insert one ACTIVE license for the given user, product and order.

        Raises:
            TransactionError: Every attempt collided with an existing key
        """
        for attempt in range(1, self._max_attempts + 1):
            entity = License(
                user_id=user_id,
                product_id=product_id,
                order_id=order_id,
                license_key=self._generate(),
                status=LicenseStatus.ACTIVE,
                max_ips=LicenseConstants.DEFAULT_MAX_IPS,
            )
            if await uow.licenses.try_insert(entity):
                return entity
            logger.warning(
                f"License key collision for order {order_id} "
                f"(attempt {attempt}/{self._max_attempts})"
            )

        raise TransactionError(
            "Could not generate a unique license key",
            details={"order_id": order_id, "attempts": self._max_attempts},
        )
