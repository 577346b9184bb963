"""Core decision logic: environments, log admission, flags, experiments."""
