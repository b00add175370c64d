"""
Test Suite

Contains unit tests for the price aggregator.

Structure:
- tests/unit/: Tests for individual components (formatting, cache, providers,
  orchestrator, HTTP surface). Provider HTTP calls are monkeypatched.

Uses pytest with pytest-asyncio for testing async functionality.
"""
