"""
Environment-based feature flags for the aggregation backend.

Flags select between the calculation policies the product has not settled on
yet (trusting a stored net worth vs. always recomputing it, counting
short-term rental income towards NOI). The aggregation functions take these
as plain arguments; only the HTTP layer reads the flags.
"""

import os
import logging
from typing import Dict
from enum import Enum

logger = logging.getLogger(__name__)


class FeatureFlagKey(Enum):
    """Feature flag keys."""
    TRUST_STORED_NET_WORTH = "trust_stored_net_worth"
    SHORT_TERM_INCOME_IN_NOI = "short_term_income_in_noi"


class FeatureFlags:
    """
    Feature flag management system.

    Flags are read from ``FF_*`` environment variables when the instance is
    created and can be re-read with ``reload_flags``.
    """

    def __init__(self):
        """Initialize feature flags from environment variables."""
        self.flags = self._load_flags()
        logger.info(f"Feature flags initialized: {self.flags}")

    def _load_flags(self) -> Dict[str, bool]:
        """Load feature flags from environment variables or defaults."""
        return {
            FeatureFlagKey.TRUST_STORED_NET_WORTH.value: self._parse_bool_env(
                'FF_TRUST_STORED_NET_WORTH',
                default='true'   # A stored netWorth wins over the recomputed one
            ),
            FeatureFlagKey.SHORT_TERM_INCOME_IN_NOI.value: self._parse_bool_env(
                'FF_SHORT_TERM_INCOME_IN_NOI',
                default='false'  # NOI counts collected long-term rent only
            ),
        }

    def _parse_bool_env(self, env_var: str, default: str) -> bool:
        """Parse boolean environment variable with defaults."""
        value = os.getenv(env_var, default).lower().strip()
        return value in ('true', '1', 'yes', 'on', 'enabled')

    def is_enabled(self, flag_key: str) -> bool:
        """
        Check if a feature flag is enabled.

        Unknown flags are reported as disabled.
        """
        if flag_key not in self.flags:
            logger.warning(f"Unknown feature flag requested: {flag_key}")
            return False
        return self.flags[flag_key]

    def is_enabled_enum(self, flag_key: FeatureFlagKey) -> bool:
        """Type-safe feature flag check using enum."""
        return self.is_enabled(flag_key.value)

    def get_all_flags(self) -> Dict[str, bool]:
        return dict(self.flags)

    def reload_flags(self) -> None:
        """Reload feature flags from environment (useful for runtime updates)."""
        old_flags = self.flags.copy()
        self.flags = self._load_flags()

        for key, new_value in self.flags.items():
            old_value = old_flags.get(key, False)
            if old_value != new_value:
                logger.info(f"Feature flag changed: {key} {old_value} -> {new_value}")


# Global feature flags instance
feature_flags = FeatureFlags()


def get_feature_flags() -> FeatureFlags:
    """Get the global feature flags instance."""
    return feature_flags
