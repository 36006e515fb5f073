# flake8: noqa: F401 (re-export)

from .requests import (
    DisableTwoFactorRequest,
    LoginRequest,
    ProviderLoginRequest,
    RefreshRequest,
    RegisterRequest,
    TwoFactorCodeRequest,
)
from .responses import (
    AuthResponse,
    MessageResponse,
    TokenPairResponse,
    TwoFactorRequiredResponse,
    TwoFactorSetupResponse,
    TwoFactorStatusResponse,
    UserOut,
)
