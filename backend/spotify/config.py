"""
Spotify catalog configuration.

Credentials are read at call time (see SpotifyCatalog.from_env) so a .env
change is picked up on restart without touching code:
  SPOTIFY_CLIENT_ID=...
  SPOTIFY_CLIENT_SECRET=...

Override the outbound timeout via SPOTIFY_TIMEOUT_SECONDS (e.g. in .env):
  SPOTIFY_TIMEOUT_SECONDS=5
"""

import os

TOKEN_URL = "https://accounts.spotify.com/api/token"
SEARCH_URL = "https://api.spotify.com/v1/search"

SEARCH_LIMIT = int(os.environ.get("SPOTIFY_SEARCH_LIMIT", "5"))
TIMEOUT_SECONDS = float(os.environ.get("SPOTIFY_TIMEOUT_SECONDS", "10"))

# Refresh the bearer token this long before Spotify says it expires
TOKEN_REFRESH_MARGIN_SECONDS = 60
