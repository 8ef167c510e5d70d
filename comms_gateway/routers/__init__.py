"""HTTP routers.

Gateway routes accept every method so that authentication runs before the
method check; OPTIONS never reaches them (see the CORS middleware).
"""

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]
