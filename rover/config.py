import os

DEFAULT_IMAGE_SIZE = int(os.getenv("ROVER_DEFAULT_SIZE", 256))
DEFAULT_IMAGE_FORMAT = os.getenv("ROVER_DEFAULT_FORMAT", "webp")

REQUEST_TIMEOUT = float(os.getenv("ROVER_REQUEST_TIMEOUT", 10))
POOL_SIZE = int(os.getenv("ROVER_POOL_SIZE", 20))
DECODE_WORKERS = int(os.getenv("ROVER_DECODE_WORKERS", min(4, os.cpu_count() or 1)))

CORS_ORIGINS = os.getenv("ROVER_CORS_ORIGINS", "*").split()
CACHE_MAX_AGE = 604800

LOG_LEVEL = os.getenv("ROVER_LOG_LEVEL", "INFO").upper()

HOST = os.getenv("ROVER_HOST", "127.0.0.1")
PORT = int(os.getenv("ROVER_PORT", 3000))
WORKERS = int(os.getenv("ROVER_WORKERS", 2))
THREADS = int(os.getenv("ROVER_THREADS", 8))
