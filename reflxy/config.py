"""
Configuration management

validate_config() runs whenever a PatternInsightService is constructed.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# AI Models
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
INSIGHT_MODEL: str = os.getenv("INSIGHT_MODEL", "gpt-4o-mini")
INSIGHT_REWRITE_TIMEOUT: float = float(os.getenv("INSIGHT_REWRITE_TIMEOUT", "8.0"))
INSIGHT_MAX_LENGTH: int = int(os.getenv("INSIGHT_MAX_LENGTH", "220"))

# Pattern insight window
# - MIN_ANALYSES: below this many analyses no insight is generated at all
# - TARGET_ANALYSES / MAX_ANALYSES: bounds for how many recent analyses are sampled
MIN_ANALYSES: int = int(os.getenv("MIN_ANALYSES", "5"))
TARGET_ANALYSES: int = int(os.getenv("TARGET_ANALYSES", "10"))
MAX_ANALYSES: int = int(os.getenv("MAX_ANALYSES", "20"))
MIN_PATTERN_STRENGTH: float = float(os.getenv("MIN_PATTERN_STRENGTH", "0.35"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# Validation
def validate_config() -> None:
    """Validate pattern insight configuration"""
    if MIN_ANALYSES < 1:
        raise ValueError("MIN_ANALYSES must be at least 1")
    if TARGET_ANALYSES > MAX_ANALYSES:
        raise ValueError("TARGET_ANALYSES cannot exceed MAX_ANALYSES")
    if not 0.0 <= MIN_PATTERN_STRENGTH <= 1.0:
        raise ValueError("MIN_PATTERN_STRENGTH must be between 0 and 1")
    if INSIGHT_REWRITE_TIMEOUT <= 0:
        raise ValueError("INSIGHT_REWRITE_TIMEOUT must be positive")
    # OPENAI_API_KEY is optional (templated insights are used without it)
