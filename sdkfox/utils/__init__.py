"""Utility functions for sdkfox."""

from sdkfox.utils.helpers import (
    PRODUCT_NAME,
    ensure_dir,
    get_arch_type,
    get_data_path,
    get_home_path,
    get_os_type,
)
from sdkfox.utils.exceptions import (
    SdkfoxError,
    ValidationError,
    NotFoundError,
    CodecError,
    ArityMismatchError,
    PluginError,
    PluginInvalidError,
    HookError,
    NoResultProvided,
    ErrorCategory,
    classify_exception,
    format_error,
    is_no_result_provided,
)

__all__ = [
    "PRODUCT_NAME",
    "ensure_dir",
    "get_arch_type",
    "get_data_path",
    "get_home_path",
    "get_os_type",
    "SdkfoxError",
    "ValidationError",
    "NotFoundError",
    "CodecError",
    "ArityMismatchError",
    "PluginError",
    "PluginInvalidError",
    "HookError",
    "NoResultProvided",
    "ErrorCategory",
    "classify_exception",
    "format_error",
    "is_no_result_provided",
]
