"""Tests for the cluster controller."""
