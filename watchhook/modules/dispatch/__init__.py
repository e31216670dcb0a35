"""
Dispatch Module - Black Box Interface

Purpose: Run the hook command once per event, in order, one at a time
Interface: DispatchPipeline.submit(), close(), join(); CommandInvoker.invoke()
Hidden: Hand-off queue, worker thread, subprocess handling, YAML rendering

Can be replaced with any runner that keeps per-event ordering and fails fast.
"""

from .invoker import CommandInvocation, CommandInvoker, build_invocation
from .pipeline import DEFAULT_QUEUE_SIZE, DispatchPipeline, PipelineState
from .serializer import serialize_object

__all__ = [
    "CommandInvocation",
    "CommandInvoker",
    "DEFAULT_QUEUE_SIZE",
    "DispatchPipeline",
    "PipelineState",
    "build_invocation",
    "serialize_object",
]
