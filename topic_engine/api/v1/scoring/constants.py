"""Constants for scoring routes."""

TOO_MANY_CANDIDATES_DETAIL = "Too many candidates in one session"
