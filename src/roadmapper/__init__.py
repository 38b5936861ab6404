"""Roadmapper - project roadmap planning board with timeline row packing."""
