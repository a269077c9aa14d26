# Core decoding components

# Export the pipeline and its stages
from .log_line import RawLine, frame
from .rpc import RpcCall, RpcDirection, RpcReconstructor
from .interpreters import InterpretedEvent, categorize_rpc_name, interpret_rpc
from .gre_tracker import GreGameTracker
from .pipeline import LineResult, LogPipeline, PipelineResult

# Export event bus and performance monitoring
from .events import Event, EventBus, EventType
from .monitoring import PerformanceMonitor, get_monitor

__all__ = [
    'RawLine',
    'frame',
    'RpcCall',
    'RpcDirection',
    'RpcReconstructor',
    'InterpretedEvent',
    'categorize_rpc_name',
    'interpret_rpc',
    'GreGameTracker',
    'LineResult',
    'LogPipeline',
    'PipelineResult',
    'Event',
    'EventBus',
    'EventType',
    'PerformanceMonitor',
    'get_monitor'
]
