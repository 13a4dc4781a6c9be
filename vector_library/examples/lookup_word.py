# ==================================================
# examples/lookup_word.py
# ==================================================
import argparse, sys
from vector_library import VectorLibrary

def main(argv=None):
    p = argparse.ArgumentParser(description="Look up one word in a vector library.")
    p.add_argument("library", help="library directory (contains info.json)")
    p.add_argument("word")
    args = p.parse_args(argv)

    lib   = VectorLibrary(args.library)
    entry = lib.get(args.word)
    if entry is None:
        print(f"{args.word!r} not found")
        return 1
    print("Entry:", entry.word)
    print("Vector Scaling:", entry.scale)
    print("Vector Data", entry.codes.tolist())
    print("Reconstituted Vector:", entry.vector(lib.info.resolution_bits).tolist())
    return 0

if __name__ == "__main__":
    sys.exit(main())
