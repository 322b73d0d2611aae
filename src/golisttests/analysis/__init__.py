"""Test-name extraction strategies and their building blocks."""
