"""
Configuration module for SOLPRISM Shield.

Centralizes configuration with environment variable support. Values are
read once at import time.
"""

import os

# ============================================================
# Environment Configuration
# ============================================================

# Agent identity recorded in every trace
DEFAULT_AGENT_NAME = os.getenv("SOLPRISM_AGENT_NAME", "AgentShield")

# Logging
LOG_LEVEL = os.getenv("SOLPRISM_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("SOLPRISM_LOG_JSON", "true").lower() in ("1", "true", "yes")
LOG_FILE = os.getenv("SOLPRISM_LOG_FILE", "")

# Number of hex characters of a hash shown in log lines
HASH_DISPLAY_LENGTH = int(os.getenv("SOLPRISM_HASH_DISPLAY_LENGTH", "16"))

# Optional Ed25519 key file used to sign commitments
SIGNING_KEY_PATH = os.getenv("SOLPRISM_SIGNING_KEY_PATH", "")


# ============================================================
# Feature Flags
# ============================================================

def signing_enabled() -> bool:
    """Check if a signing key file is configured."""
    return bool(SIGNING_KEY_PATH)


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("SOLPRISM_DEBUG", "").lower() in ("1", "true", "yes")
