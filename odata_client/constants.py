"""
odata_client.constants - Shared constants
==========================================

Operator sets, protocol versions, header names and error messages shared by
the query builder, the grammars and the request layer.
"""

SDK_VERSION = "0.3.0"

ODATA_VERSION = "4.0"
MAX_ODATA_VERSION = "4.0"

# Every comparison operator the builder recognizes. A grammar decides which of
# these it can actually express; the rest are rejected at construction time.
OPERATORS = (
    "=", "<", ">", "<=", ">=", "<>", "!=",
    "like", "like binary", "not like", "between", "ilike",
    "&", "|", "^", "<<", ">>",
    "rlike", "regexp", "not regexp",
    "~", "~*", "!~", "!~*", "similar to",
    "not similar to", "not ilike", "~~*", "!~~*",
)

# OData comparison operators spelled natively. Recognized even where a
# grammar cannot express them, so they are rejected instead of being read
# as a value.
ODATA_OPERATORS = ("eq", "ne", "gt", "ge", "lt", "le", "has", "in")

# Operators that may be paired with a null value.
NULL_SAFE_OPERATORS = ("=", "eq", "!=", "ne")

BINDING_CATEGORIES = ("select", "where", "order")

ORDER_DIRECTIONS = ("asc", "desc")

BOOLEANS = ("and", "or")


class RequestHeader:
    CONTENT_TYPE = "Content-Type"
    ACCEPT = "Accept"
    AUTHORIZATION = "Authorization"
    ODATA_VERSION = "OData-Version"
    ODATA_MAX_VERSION = "OData-MaxVersion"
    USER_AGENT = "User-Agent"
    PREFER = "Prefer"


# Messages
ENTITY_SET_REQUIRED = "An entity set must be set with from_() before the query can run."
REQUEST_URL_MISSING = "Request URL is missing."
UNABLE_TO_PARSE_RESPONSE = "Unable to parse response body as JSON."
EMPTY_COUNT_RESPONSE = "The $count request returned an empty body."
