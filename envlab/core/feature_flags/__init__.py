"""Feature Flags.

Provides per-environment feature toggling with:
- Environment gates
- Percentage rollouts (non-sticky, one draw per evaluation)
- Configured-state listings for display
"""

from envlab.core.feature_flags.client import (
    PREDEFINED_FLAGS,
    EvaluationReason,
    FeatureFlag,
    FeatureFlagEvaluator,
    FeatureFlagRegistry,
    FlagEvaluation,
    FlagMetadata,
    FlagState,
    get_flag_evaluator,
    is_enabled,
    list_all,
)

__all__ = [
    "PREDEFINED_FLAGS",
    "EvaluationReason",
    "FeatureFlag",
    "FeatureFlagEvaluator",
    "FeatureFlagRegistry",
    "FlagEvaluation",
    "FlagMetadata",
    "FlagState",
    "get_flag_evaluator",
    "is_enabled",
    "list_all",
]
