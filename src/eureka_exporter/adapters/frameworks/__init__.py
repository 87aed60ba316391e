"""Serving adapters exposing collectors over HTTP."""
