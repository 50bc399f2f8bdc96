"""
Configuration for the SilentRoll game, decryption oracle and client
"""
from typing import Dict, Any
import os
from pathlib import Path


def _load_env_value(name: str, default: str = "") -> str:
    """
    Load a setting from environment variables or the root .env file.
    Supports both underscore and dash separators.
    """
    dashed = name.replace("_", "-")
    for key in (name, dashed):
        value = os.getenv(key)
        if value:
            return value.strip()

    env_path = Path(__file__).resolve().parent.parent / ".env"
    if env_path.exists():
        with env_path.open("r", encoding="utf-8") as env_file:
            for raw_line in env_file:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue

                if "=" in line and (":" not in line or line.index("=") < line.index(":")):
                    key, val = line.split("=", 1)
                elif ":" in line:
                    key, val = line.split(":", 1)
                else:
                    continue

                key = key.strip()
                val = val.strip().strip('"').strip("'")
                if key in (name, dashed):
                    return val

    return default


# Game Configuration
GAME_CONFIG: Dict[str, Any] = {
    # Dice Rules
    "dice_min": 1,
    "dice_max": 6,
    "dice_count": 2,

    # Sum >= big_threshold is "big", anything lower is "small"
    "big_threshold": 7,

    # Points granted on a correct guess
    "reward": 10000,

    # Address of the game contract (ACL principal for every handle it computes)
    "contract_address": _load_env_value("SILENTROLL_CONTRACT_ADDRESS", "0x" + "5e" * 20),

    # An open round older than this may be replaced by a new start_round
    "stale_round_seconds": 7 * 24 * 60 * 60,
}


# Network Configuration
NETWORK_CONFIG: Dict[str, Any] = {
    # Decryption oracle (KMS gateway) address
    "oracle_url": _load_env_value("SILENTROLL_ORACLE_URL", "http://localhost:9100"),
    "oracle_port": int(_load_env_value("SILENTROLL_ORACLE_PORT", "9100")),

    "connection_timeout": 10,
    "decrypt_request_timeout": 60,

    # Retry policy for DecryptionServiceUnavailable
    "decrypt_retries": 3,
    "retry_backoff": 1.0,
}


# Cryptography Configuration
CRYPTO_CONFIG: Dict[str, Any] = {
    "scheme": "BFV",
    # 2^31 - 1; encrypted points wrap modulo this prime
    "plain_modulus": 2147483647,
    # Indicator polynomial powers (4) + coefficient scaling, equality and
    # reward selection on top
    "multiplicative_depth": 7,
    "multiparty_mode": "NOISE_FLOODING",
    "kms_parties": int(_load_env_value("SILENTROLL_KMS_PARTIES", "3")),

    # Domain separation for the authorization message
    "chain_id": 31337,
    "eip712_name": "Decryption",
    "eip712_version": "1",
    "verifying_contract": "0x" + "00" * 19 + "44",

    # User decryption validity window
    "duration_days": 10,
    "max_duration_days": 365,
}


# UI Configuration
UI_CONFIG: Dict[str, Any] = {
    "show_handles": False,
    "log_dir": "logs",
}
