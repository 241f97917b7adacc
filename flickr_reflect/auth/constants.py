"""Constants for Flickr authentication and credential caching."""

from __future__ import annotations

import os

# Browser page where the user grants access to a frob. Not fetched by the client.
AUTH_URL = os.environ.get("FLICKR_AUTH_URL", "https://www.flickr.com/services/auth/")
AUTH_PERMS = "read"

GET_FROB_METHOD = "flickr.auth.getFrob"
GET_TOKEN_METHOD = "flickr.auth.getToken"

# Credential cache
CACHE_DIR = ".flickr_reflect"
CACHE_SUBDIR = "cache"
FROB = "frob"
TOKEN = "token"
SECRET_NAMES = (FROB, TOKEN)

# Error messages
ERROR_NO_SECRET = "You are using a signed method, please add your api secret."
ERROR_NO_API_KEY = "Flickr api key needed. Pass key or set the FLICKR_API_KEY environment variable."
ERROR_NO_APIS = "Please specify which apis you'd like to use."
