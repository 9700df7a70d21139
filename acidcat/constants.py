from __future__ import annotations

import os

from acidcat.utils.common import env_string, env_integer, env_bool

# Environment variables
ACIDCAT_SYS_LOG_LEVEL = env_string("ACIDCAT_SYS_LOG_LEVEL", "DEBUG")
ACIDCAT_SYS_LOG_DIR = env_string(
    "ACIDCAT_SYS_LOG_DIR",
    "/tmp/acidcat/var/output/logs/",
)
ACIDCAT_SYS_INFO_LOG_BASE_FILE_NAME = env_string(
    "ACIDCAT_SYS_INFO_LOG_BASE_FILE_NAME",
    "acidcat-python.info.log",
)
ACIDCAT_SYS_DEBUG_LOG_BASE_FILE_NAME = env_string(
    "ACIDCAT_SYS_DEBUG_LOG_BASE_FILE_NAME",
    "acidcat-python.debug.log",
)
# A json context which will be logged along with other context args.
ACIDCAT_LOGGER_CONTEXT = env_string("ACIDCAT_LOGGER_CONTEXT", None)
ACIDCAT_LOGGER_USE_SINGLE_HANDLER = env_bool(
    "ACIDCAT_LOGGER_USE_SINGLE_HANDLER",
    False,
)

# Warehouse holding the live table directories written by the engine under test.
ACIDCAT_WAREHOUSE_DIR = env_string(
    "ACIDCAT_WAREHOUSE_DIR",
    "/user/hive/warehouse",
)
ACIDCAT_METASTORE_TIMEOUT_MS = env_integer("ACIDCAT_METASTORE_TIMEOUT_MS", 10000)
ACIDCAT_METASTORE_USER = env_string("ACIDCAT_METASTORE_USER", "test")

# Static fixtures (nation.tbl, nation_delete_deltas/) are resolved from here,
# never from the warehouse.
ACIDCAT_TEST_RESOURCE_ROOT = env_string(
    "ACIDCAT_TEST_RESOURCE_ROOT",
    os.path.join(os.path.dirname(__file__), "tests", "test_utils", "resources"),
)

# Directory layout
DELTA_PREFIX = "delta_"
DELETE_DELTA_PREFIX = "delete_delta_"
BASE_PREFIX = "base_"
BUCKET_PREFIX = "bucket_"
WRITE_ID_WIDTH = 7
STATEMENT_ID_WIDTH = 4
BUCKET_ID_WIDTH = 5

# Transaction log
TXN_LOG_FILE_NAME = "txn_ledger.mpk"

# Expected row oracle
DEFAULT_REPLICATION_FACTOR = 1000
INVALID_INT_SENTINEL = -1
INVALID_STRING_SENTINEL = "INVALID"
BASE_ROW_DELIMITER = "|"
NATION_FILE_NAME = "nation.tbl"
NATION_DELETE_DELTAS_DIR_NAME = "nation_delete_deltas"
DELETED_LINES_FILE_NAME = "_deleted_lines"

SIGNED_INT64_MAX_VALUE = 2**63 - 1
