"""Prometheus metrics for flag evaluation, log admission and experiments.

All metric objects are defined at import time against the default registry.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

flag_evaluations_total = Counter(
    "envlab_flag_evaluations_total",
    "Feature flag evaluations",
    ["flag", "environment", "result"],
)
flag_not_found_total = Counter(
    "envlab_flag_not_found_total",
    "Evaluations of unknown feature flags",
    ["flag"],
)
log_admissions_total = Counter(
    "envlab_log_admissions_total",
    "Log admission decisions",
    ["severity", "decision"],
)
experiment_users_total = Counter(
    "envlab_experiment_users_total",
    "Simulated users folded into experiment results",
    ["experiment", "variant", "converted"],
)
experiment_users_excluded_total = Counter(
    "envlab_experiment_users_excluded_total",
    "Simulated users rejected by the experiment rollout gate",
    ["experiment"],
)
experiment_total_users = Gauge(
    "envlab_experiment_total_users",
    "Users currently counted for the active experiment",
    ["experiment"],
)
