"""
Timer control plane.

Caller-side composition of the timer core: process presets, runs, and the
HTTP control API.
"""
