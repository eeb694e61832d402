# ==============================================================================
# UNIT OF WORK PACKAGE
# ==============================================================================

from licensestore.database.unit_of_work.uow import (
    AbstractUnitOfWork,
    PostCommitHook,
    UnitOfWork,
)

__all__ = [
    "AbstractUnitOfWork",
    "PostCommitHook",
    "UnitOfWork",
]
