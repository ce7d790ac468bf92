"""Global pytest configuration."""

import os

# Keep tests offline: no generative backend or routing engines unless a test wires one
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("OTP_TRANSMODEL_URL", "")
os.environ.setdefault("OTP_PLAN_URL", "")
