"""Domain layer: error codes and schemas."""

from .errors import ErrorCodes, ErrorReasons
from .schemas import AvailableModel, LLMSettings, ModelConfig
