"""Rack setup configuration service."""
