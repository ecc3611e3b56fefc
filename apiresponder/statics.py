DEFAULT_ENCODING = "utf-8"
DEFAULT_FORMAT = "json"
FORMAT_PARAM = "format"
DEFAULT_STATUS_CODE = 200
ACCESS_DENIED_MESSAGE = "You do not have sufficient permissions to access."
