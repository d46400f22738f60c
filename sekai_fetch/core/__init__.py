"""
Core application engine for orchestrating a fetch run.

The `FetchOrchestrator` walks the run states and hands each joined resource
to the `ResourceProcessor`.
"""
