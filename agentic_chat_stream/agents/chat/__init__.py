"""Streaming chat agent."""
