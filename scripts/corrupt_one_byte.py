import sys
from pathlib import Path

def main():
    if len(sys.argv) != 2:
        print("Usage: corrupt_one_byte.py <msgs.idx>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    b = bytearray(p.read_bytes())
    if len(b) < 4 + 32:
        print("File too small to corrupt safely.")
        raise SystemExit(2)

    # Flip a byte in the size field of the first index record.
    # Version header is 4 bytes; size sits 24 bytes into the record.
    idx = 4 + 24
    b[idx] ^= 0x01
    p.write_bytes(bytes(b))
    print(f"Corrupted 1 byte at offset {idx} in {p}")

if __name__ == "__main__":
    main()
