# ── One-time password policy (fixed, not configurable) ───────────────────────
OTP_LENGTH: int = 6
OTP_EXPIRE_SECONDS: int = 120     # 2 minutes
OTP_MAX_ATTEMPTS: int = 3

# ── Credential policy defaults (overridable via Settings) ────────────────────
MAX_FAILED_LOGINS: int = 5
