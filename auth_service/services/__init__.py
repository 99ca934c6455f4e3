"""Domain services: user directory, refresh token store, auth orchestration."""
