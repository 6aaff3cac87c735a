"""Tests for the helper scripts under scripts/."""
