"""Project-wide constants (chunk size bounds, buffer sizes, default paths)."""

KIB: int = 1024
MIB: int = 1024 * KIB

DEFAULT_MIN_CHUNK_SIZE: int = 512 * KIB
DEFAULT_MAX_CHUNK_SIZE: int = 10 * MIB
CHUNK_SIZE_ALIGNMENT: int = 64 * KIB
# Estimation shrinks the chunk size when the tree would yield fewer chunks than this
MIN_TOTAL_CHUNKS: int = 100
SIZE_PERCENTILE: float = 0.9

FILE_BUFFER_SIZE: int = 4 * MIB
COPY_PIECE_SIZE: int = 64 * KIB
COMPRESSION_LEVEL: int = 1

DEFAULT_CHUNK_OUTPUT_PATH: str = "chunks"
CHUNK_FILE_SUFFIX: str = ".chunk"
DEFAULT_MANIFEST_PATH: str = "build.manifest"
MANIFEST_PATH_SEPARATOR: str = "\\"

DEFAULT_CHUNK_START_ID: int = 1
WORKERS_PER_CPU: int = 2
QUEUE_SLOTS_PER_WORKER: int = 10
PROGRESS_REPORT_INTERVAL: int = 100
