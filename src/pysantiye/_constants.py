"""Internal constants shared across the library."""

USER_AGENT = "pysantiye"
REST_PATH = "/rest/v1"
REALTIME_PATH = "/realtime/v1/websocket"
REALTIME_VSN = "1.0.0"
DEFAULT_SCHEMA = "public"

#: PostgREST error codes meaning "this table does not exist".
UNKNOWN_RESOURCE_CODES: frozenset[str] = frozenset({"42P01", "PGRST205"})

# ------------------------------------------------------------------
# Phoenix channel protocol
# ------------------------------------------------------------------

PHX_JOIN = "phx_join"
PHX_LEAVE = "phx_leave"
PHX_REPLY = "phx_reply"
PHX_ERROR = "phx_error"
PHX_CLOSE = "phx_close"
PHX_HEARTBEAT = "heartbeat"
PHX_TOPIC = "phoenix"
POSTGRES_CHANGES = "postgres_changes"
SYSTEM_EVENT = "system"
