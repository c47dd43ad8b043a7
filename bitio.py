from typing import Tuple


class BitOutputStream:
    """Packs bits MSB-first into bytes; the last byte is zero padded."""

    def __init__(self):
        self._out = bytearray()
        self._acc = 0
        self._acc_bits = 0 # bits currently in _acc (0..7)

    def write_bit(self, bit: int) -> None:
        if bit not in (0, 1):
            raise ValueError(f"bit must be 0 or 1, got {bit!r}")
        self._acc = (self._acc << 1) | bit
        self._acc_bits += 1
        if self._acc_bits == 8:
            self._out.append(self._acc & 0xFF)
            self._acc = 0
            self._acc_bits = 0

    def write_code(self, code: str) -> None:
        for ch in code:
            self.write_bit(int(ch))

    def finish(self) -> Tuple[bytes, int]:
        """
        Flush the partial byte.
        Returns (packed_bytes, pad_bits) where pad_bits is number of 0 bits added at the end
        """
        pad_bits = 0
        if self._acc_bits != 0:
            pad_bits = 8 - self._acc_bits
            self._out.append((self._acc << pad_bits) & 0xFF)
            self._acc = 0
            self._acc_bits = 0
        return bytes(self._out), pad_bits


class BitInputStream:
    """Reads bits MSB-first, ignoring the pad_bits trailing bits of the payload."""

    def __init__(self, payload: bytes, pad_bits: int = 0):
        if not 0 <= pad_bits <= 7:
            raise ValueError(f"pad_bits must be in 0..7, got {pad_bits}")
        if pad_bits and not payload:
            raise ValueError("pad_bits given for an empty payload")
        self._payload = payload
        self._total_bits = len(payload) * 8 - pad_bits
        self._pos = 0

    def has_next_bit(self) -> bool:
        return self._pos < self._total_bits

    def next_bit(self) -> int:
        if self._pos >= self._total_bits:
            raise EOFError("Unexpected end of bitstream")
        byte = self._payload[self._pos >> 3]
        bit = (byte >> (7 - (self._pos & 7))) & 1
        self._pos += 1
        return bit


def pack_bits(bitstring: str) -> Tuple[bytes, int]:
    out = BitOutputStream()
    out.write_code(bitstring)
    return out.finish()


def unpack_bits(payload: bytes, pad_bits: int = 0) -> str:
    source = BitInputStream(payload, pad_bits)
    bits = []
    while source.has_next_bit():
        bits.append('1' if source.next_bit() else '0')
    return ''.join(bits)
