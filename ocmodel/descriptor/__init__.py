"""The component descriptor model and its RFC 3339 time values."""