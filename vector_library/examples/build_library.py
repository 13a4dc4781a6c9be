# ==================================================
# examples/build_library.py
# ==================================================
import argparse, logging, os, sys
from vector_library import build, VectorLibraryError

SHARD_BITS  = int(os.getenv("VECTOR_LIBRARY_SHARD_BITS",  "13"))
MAX_ENTRIES = int(os.getenv("VECTOR_LIBRARY_MAX_ENTRIES", "500000"))

def main(argv=None):
    p = argparse.ArgumentParser(description="Build a sharded, quantized word vector library.")
    p.add_argument("source", help="fastText .vec file or URL (.gz / .zst accepted)")
    p.add_argument("output", help="library directory to write")
    p.add_argument("--shard-bits", type=int, default=SHARD_BITS)
    p.add_argument("--max-entries", type=int, default=MAX_ENTRIES)
    p.add_argument("--bits", type=int, default=8, help="bits per vector component")
    p.add_argument("--lowercase-all", action="store_true",
                   help="lowercase single capital letters too (first-generation behaviour)")
    p.add_argument("--workers", type=int, default=1, help="threads used to write shards")
    p.add_argument("--quiet", action="store_true")
    args = p.parse_args(argv)

    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")
    print(args.source)
    try:
        info = build(args.source, args.output,
                     shard_bits=args.shard_bits,
                     max_entries=args.max_entries,
                     resolution_bits=args.bits,
                     keep_single_caps=not args.lowercase_all,
                     progress=not args.quiet,
                     workers=args.workers)
    except VectorLibraryError as e:
        print(f"build failed: {e}", file=sys.stderr)
        return 2
    print(f"✓ {info.entry_count} entries, vector size {info.vector_size} → {args.output}")
    print("Vector Library Build Complete!")
    return 0

if __name__ == "__main__":
    sys.exit(main())
