# ==============================================================================
# API PACKAGE
# ==============================================================================

from licensestore.api.router import api_router

__all__ = ["api_router"]
