"""CLI module for sdkfox."""
