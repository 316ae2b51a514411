"""Core infrastructure for trustctl: paths, configuration, state and theme."""
