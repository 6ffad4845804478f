"""Unit tests for ldapc."""
