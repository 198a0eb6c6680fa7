"""Centralized user-facing text for the pipecache CLI."""

from __future__ import annotations

class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "pipecache - incremental asset compiler with a relocatable dependency cache."
    HELP_LOGICAL_PATH = "Logical path of the asset, relative to a load path."
    HELP_ROOT = "Project root (defaults to the configured root or the current directory)."
    HELP_OUTPUT = "Directory that receives the digest-named bundle."
    HELP_GZIP = "Gzip the written bundle."
    HELP_PRINT = "Print the bundled output to stdout."
    HELP_CACHE_LIST = "List cached entry records."
    HELP_CACHE_CLEAR = "Remove every cached entry record for the root."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_SET_ROOT = "Persist the default project root."
    HELP_CLEAR_ROOT = "Forget the stored project root."
    HELP_SET_LOAD_PATH = "Replace the load paths (repeat the option for several)."
    HELP_SET_DIGEST = "Set the digest algorithm used for content hashes."
    HELP_SET_LOG_LEVEL = "Set the log level (DEBUG, INFO, WARNING, ERROR)."
    HELP_SET_OUTPUT_DIR = "Set the default output directory."
    HELP_SET_GZIP = "Gzip written bundles by default (true/false)."

    ERROR_CONFIG_JSON_INVALID = "Config JSON must be an object."
    ERROR_CONFIG_VALUE_INVALID = "Config value for {field} is invalid."
    ERROR_DIGEST_INVALID = "Unsupported digest algorithm: {value}."
    ERROR_LOG_LEVEL_INVALID = "Unsupported log level {value}; choose one of {allowed}."
    ERROR_BOOLEAN_INVALID = "Expected a boolean value, got {value}."
    ERROR_PREFIX = "Error: "

    INFO_COMPILED = "Compiled {path} ({count} file{plural}, {size} bytes)."
    INFO_WRITTEN = "Wrote {path}."
    INFO_FRESH = "{path} is fresh."
    WARNING_STALE = "{path} is stale and will be rebuilt on next compile."
    WARNING_NOT_CACHED = "No cached entry for {path}."
    INFO_CACHE_EMPTY = "No cached entries under {path}."
    INFO_CACHE_CLEARED = "Removed {count} cached entr{plural} for {path}."
    INFO_ROOT_SET = "Default root set to {value}."
    INFO_ROOT_CLEARED = "Default root cleared."
    INFO_LOAD_PATHS_SET = "Load paths set to {value}."
    INFO_DIGEST_SET = "Digest algorithm set to {value}."
    INFO_LOG_LEVEL_SET = "Log level set to {value}."
    INFO_OUTPUT_DIR_SET = "Output directory set to {value}."
    INFO_GZIP_SET = "Gzip output set to {value}."
    INFO_CONFIG_SUMMARY = (
        "Root: {root}\n"
        "Load paths: {load_paths}\n"
        "Digest algorithm: {digest}\n"
        "Log level: {log_level}\n"
        "Output directory: {output_dir}\n"
        "Gzip: {gzip}"
    )

    TABLE_TITLE_CHECK = "Freshness of {path}"
    TABLE_TITLE_CACHE = "Cached entries under {path}"
    TABLE_HEADER_INDEX = "#"
    TABLE_HEADER_LOGICAL = "Logical path"
    TABLE_HEADER_KIND = "Kind"
    TABLE_HEADER_STATUS = "Status"
    TABLE_HEADER_PATH = "File path"
    TABLE_HEADER_UPDATED = "Updated"
    TABLE_HEADER_SIZE = "Size"
