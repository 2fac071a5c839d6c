"""Tests for the cyclesense integration."""
