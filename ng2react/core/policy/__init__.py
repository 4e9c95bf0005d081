"""Pipe and injection translation policy."""

from .registry import (
    InjectionHandler,
    PipeHandler,
    PolicyRegistry,
    default_injection_transform,
    default_pipe_transform,
    load_policy,
)

__all__ = [
    "InjectionHandler",
    "PipeHandler",
    "PolicyRegistry",
    "default_injection_transform",
    "default_pipe_transform",
    "load_policy",
]
