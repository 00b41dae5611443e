"""Shared constant names: trace keys, call types and render types."""

from __future__ import annotations

from enum import Enum

TRACE_ID = "trace_id"
HTTP_TRACE_ID = "x-trace-id"


class SysCallType(str, Enum):
    """System call kinds sent to a runner."""

    CREATE_TABLES = "CreateTables"


class UserCallType(str, Enum):
    """User callback kinds a runner can react to."""

    # page events
    ON_PAGE_LOAD = "OnPageLoad"
    ON_CREATE_TABLES = "OnCreateTables"

    # API lifecycle
    ON_API_CREATED = "OnApiCreated"
    ON_API_UPDATED = "OnApiUpdated"
    BEFORE_API_DELETE = "BeforeApiDelete"
    AFTER_API_DELETED = "AfterApiDeleted"

    # runner lifecycle
    BEFORE_RUNNER_CLOSE = "BeforeRunnerClose"
    AFTER_RUNNER_CLOSE = "AfterRunnerClose"

    # version control
    ON_VERSION_CHANGE = "OnVersionChange"

    # input interaction
    ON_INPUT_FUZZY = "OnInputFuzzy"
    ON_INPUT_VALIDATE = "OnInputValidate"

    # table operations
    ON_TABLE_DELETE_ROWS = "OnTableDeleteRows"
    ON_TABLE_ADD_ROWS = "OnTableAddRows"
    ON_TABLE_UPDATE_ROWS = "OnTableUpdateRows"
    ON_TABLE_SEARCH = "OnTableSearch"

    # preview of dangerous operations
    ON_DRY_RUN = "OnDryRun"

    # configuration
    ON_UPDATE_CONFIG = "OnUpdateConfig"
    ON_GET_CONFIG = "OnGetConfig"


class RenderType(str, Enum):
    """How a function's result is rendered."""

    FORM = "form"
    JSON = "json"
    TABLE = "table"
    FILES = "files"
    ECHARTS = "echarts"