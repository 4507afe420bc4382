__version__ = "0.1.0"

from pmw_redirect.config import RedirectConfig, VariantConfig, load_redirect_config  # noqa: E402
from pmw_redirect.deeplink import (  # noqa: E402
    DeepLinkTarget,
    ResetRequest,
    build_deep_link,
    resolve_reset_request,
)

__all__ = [
    "DeepLinkTarget",
    "RedirectConfig",
    "ResetRequest",
    "VariantConfig",
    "__version__",
    "build_deep_link",
    "load_redirect_config",
    "resolve_reset_request",
]
