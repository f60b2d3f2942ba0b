import os
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("optimistic-json")
except PackageNotFoundError:
    # Fallback for development installations
    __version__ = "0.1.0"

if os.environ.get("OPTIMISTIC_JSON_VERSION"):
    __version__ = os.environ["OPTIMISTIC_JSON_VERSION"]

# imports for easier access
from optimistic_json.json_parser import JSONParser, OptimisticJSONParser, PydanticJSONParser, get_json_parser
from optimistic_json.streaming import JSONStreamAccumulator
