"""litefetch - data-fetch engine for user-authored monitor plugins.

Plugins are declarative templates: chains of HTTP or native requests whose
responses are extracted and transformed into named outputs, published to a
key/value sink.
"""

from litefetch.engine import InstanceResult, PluginEngine
from litefetch.errors import FetchError
from litefetch.plugins import (
    PluginInstance,
    PluginTemplate,
    parse_instance_dict,
    parse_template_yaml,
)
from litefetch.sink import MemorySink, OutputSink

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "PluginEngine",
    "InstanceResult",
    "FetchError",
    "PluginTemplate",
    "PluginInstance",
    "parse_template_yaml",
    "parse_instance_dict",
    "OutputSink",
    "MemorySink",
]
