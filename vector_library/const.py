# ==================================================
# vector_library/const.py
# ==================================================
FORMAT_VERSION  = 5            # bump whenever hashing, bucketing or framing changes
HASH_NAME       = "sha256"     # digest used to pick a word's bucket
SHARD_BITS      = 13           # 2**13 = 8192 shard files
MAX_ENTRIES     = 500_000      # per-build cap on distinct words
RESOLUTION_BITS = 8            # bits per quantized component
MAX_RESOLUTION  = 16
MAX_SHARD_BITS  = 32
SHARD_SUFFIX    = ".lps"       # length-prefixed stream
INFO_FILE       = "info.json"
SCALE_FMT       = ">f"         # big-endian IEEE-754 float32
SCALE_SIZE      = 4
FRAMES_PER_ENTRY = 3           # word, scale, codes
MAX_VARINT_LEN  = 10           # enough for any 64-bit length
FLOAT32_MAX     = 3.4028234663852886e38   # largest finite float32
