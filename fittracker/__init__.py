from .client import FitTrackerClient, handle_response
from .config import api_base_url, get_environment, is_local
from .errors import (
    ApiError, AuthError,
    DetailString, DetailList, DetailMap,
    parse_detail, resolve_error_message,
)
from .journal import WeightJournal, MetricJournal
from .muscle_index import (
    MUSCLE_INDEX,
    MissingDataError,
    CalculationError,
    calculate_muscle_index,
    calculate_and_record,
)
from .profile import build_profile_patch
from .session import Session, FileStore, MemoryStore, TOKEN_KEY
from .transform import weight_series, weight_stats, muscle_index_series, muscle_index_stats

__all__ = [
    "FitTrackerClient", "handle_response",
    "api_base_url", "get_environment", "is_local",
    "ApiError", "AuthError",
    "DetailString", "DetailList", "DetailMap",
    "parse_detail", "resolve_error_message",
    "WeightJournal", "MetricJournal",
    "MUSCLE_INDEX", "MissingDataError", "CalculationError",
    "calculate_muscle_index", "calculate_and_record",
    "build_profile_patch",
    "Session", "FileStore", "MemoryStore", "TOKEN_KEY",
    "weight_series", "weight_stats", "muscle_index_series", "muscle_index_stats",
]
