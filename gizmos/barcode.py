"""Code 128 barcode encoding with a cost-minimising code-set choice, and PBM output."""

from __future__ import annotations

import math
import sys
from pathlib import Path
from typing import Optional, Sequence, Union

PATTERNS: tuple[str, ...] = (
    "11011001100", "11001101100", "11001100110", "10010011000", "10010001100",
    "10001001100", "10011001000", "10011000100", "10001100100", "11001001000",
    "11001000100", "11000100100", "10110011100", "10011011100", "10011001110",
    "10111001100", "10011101100", "10011100110", "11001110010", "11001011100",
    "11001001110", "11011100100", "11001110100", "11101101110", "11101001100",
    "11100101100", "11100100110", "11101100100", "11100110100", "11100110010",
    "11011011000", "11011000110", "11000110110", "10100011000", "10001011000",
    "10001000110", "10110001000", "10001101000", "10001100010", "11010001000",
    "11000101000", "11000100010", "10110111000", "10110001110", "10001101110",
    "10111011000", "10111000110", "10001110110", "11101110110", "11010001110",
    "11000101110", "11011101000", "11011100010", "11011101110", "11101011000",
    "11101000110", "11100010110", "11101101000", "11101100010", "11100011010",
    "11101111010", "11001000010", "11110001010", "10100110000", "10100001100",
    "10010110000", "10010000110", "10000101100", "10000100110", "10110010000",
    "10110000100", "10011010000", "10011000010", "10000110100", "10000110010",
    "11000010010", "11001010000", "11110111010", "11000010100", "10001111010",
    "10100111100", "10010111100", "10010011110", "10111100100", "10011110100",
    "10011110010", "11110100100", "11110010100", "11110010010", "11011011110",
    "11011110110", "11110110110", "10101111000", "10100011110", "10001011110",
    "10111101000", "10111100010", "11110101000", "11110100010", "10111011110",
    "10111101110", "11101011110", "11110101110",
    # Start A, Start B, Start C, Stop
    "11010000100", "11010010000", "11010011100", "1100011101011",
)

START_A = 103
START_B = 104
START_C = 105
STOP = 106
_MODULUS = 103

_SET_A = 0
_SET_B = 1
_SET_C = 2
_SHIFT_TO_B = 3  # in set A, one character shifted to set B
_SHIFT_TO_A = 4  # in set B, one character shifted to set A
_SHIFTS = (_SHIFT_TO_B, _SHIFT_TO_A)

_INF = math.inf
_DIGITS = frozenset("0123456789")


def _table(symbols: Sequence[str]) -> dict[str, int]:
    return {symbol: value for value, symbol in enumerate(symbols)}


_CODE_A = _table(
    [chr(c) for c in range(32, 96)]
    + [chr(c) for c in range(32)]
    + ["FNC 3", "FNC 2", "Shift B", "Code C", "Code B", "FNC 4", "FNC 1"]
)
_CODE_B = _table(
    [chr(c) for c in range(32, 128)]
    + ["FNC 3", "FNC 2", "Shift A", "Code C", "FNC 4", "Code A", "FNC 1"]
)
_CODE_C = _table([f"{n:02d}" for n in range(100)] + ["Code B", "Code A", "FNC 1"])


class BarcodeError(ValueError):
    """Raised when a message cannot be encoded."""


def _costs(message: str) -> list[list[float]]:
    """Row i holds, per state, the fewest symbols needed to encode message[i:]."""
    size = len(message)
    dp: list[list[float]] = [[_INF] * 5 for _ in range(size)]
    dp.append([0] * 5)
    for idx in reversed(range(size)):
        ch = message[idx]
        row, nxt = dp[idx], dp[idx + 1]

        if ch in _CODE_A:
            row[_SHIFT_TO_A] = min(row[_SHIFT_TO_A], 2 + nxt[_SET_B])
            row[_SET_A] = min(row[_SET_A], 1 + nxt[_SET_A])
            row[_SET_B] = min(row[_SET_B], 2 + nxt[_SET_A], 2 + nxt[_SHIFT_TO_A])
            row[_SET_C] = min(row[_SET_C], 2 + nxt[_SET_A])

        if ch in _CODE_B:
            row[_SHIFT_TO_B] = min(row[_SHIFT_TO_B], 2 + nxt[_SET_A])
            row[_SET_A] = min(row[_SET_A], 2 + nxt[_SET_B], 2 + nxt[_SHIFT_TO_B])
            row[_SET_B] = min(row[_SET_B], 1 + nxt[_SET_B])
            row[_SET_C] = min(row[_SET_C], 2 + nxt[_SET_B])

        if ch in _DIGITS and idx < size - 1 and message[idx + 1] in _DIGITS:
            after = dp[idx + 2]
            row[_SET_A] = min(row[_SET_A], 2 + after[_SET_C])
            row[_SET_B] = min(row[_SET_B], 2 + after[_SET_C])
            row[_SET_C] = min(row[_SET_C], 1 + after[_SET_C])
    return dp


def _switch_symbol(idx: int, current: int, target: int) -> int:
    if idx == 0:
        return START_A if target == _SET_A else START_B if target == _SET_B else START_C
    if target in _SHIFTS:
        return _CODE_A["Shift B"] if target == _SHIFT_TO_B else _CODE_B["Shift A"]
    if current == _SET_A:
        return _CODE_A["Code B"] if target == _SET_B else _CODE_A["Code C"]
    if current == _SET_B:
        return _CODE_B["Code A"] if target == _SET_A else _CODE_B["Code C"]
    return _CODE_C["Code A"] if target == _SET_A else _CODE_C["Code B"]


def _token(message: str, idx: int, state: int) -> int:
    if state in (_SET_A, _SHIFT_TO_A):
        return _CODE_A[message[idx]]
    if state in (_SET_B, _SHIFT_TO_B):
        return _CODE_B[message[idx]]
    return _CODE_C[message[idx:idx + 2]]


def encode(message: str) -> list[bool]:
    """Encode a message as Code 128 bars: True for a dark module."""
    dp = _costs(message)
    symbols: list[int] = []
    current = _SHIFT_TO_B
    checksum = 0
    weight = 1
    idx = 0

    while idx < len(message):
        row = dp[idx]
        best = min(row)
        if best == _INF:
            raise BarcodeError("Unsupported character encountered in the message.")
        state = current if idx > 0 and row[current] == best else row.index(best)

        if current != state:
            symbol = _switch_symbol(idx, current, state)
            if idx == 0:
                checksum += symbol
            else:
                checksum += weight * symbol
                weight += 1
            symbols.append(symbol)

        token = _token(message, idx, state)
        checksum += weight * token
        weight += 1
        symbols.append(token)

        if state not in _SHIFTS:
            current = state
        idx += 2 if state == _SET_C else 1

    symbols.append(checksum % _MODULUS)
    symbols.append(STOP)
    return [bit == "1" for symbol in symbols for bit in PATTERNS[symbol]]


def to_pbm(
    codes: Sequence[bool], width: int = 5, height: int = 150, quiet: int = 10
) -> bytes:
    """Render bars as a binary PBM image with quiet zones on both sides."""
    margin = "0" * (quiet * width)
    bits = margin + "".join(("1" if bar else "0") * width for bar in codes) + margin
    bits += "0" * (-len(bits) % 8)
    row = int(bits, 2).to_bytes(len(bits) // 8, "big") if bits else b""
    header = f"P4\n{(quiet + len(codes) + quiet) * width} {height}\n".encode("ascii")
    return header + row * height


def write_pbm(
    codes: Sequence[bool],
    path: Union[str, Path],
    width: int = 5,
    height: int = 150,
    quiet: int = 10,
) -> None:
    """Write bars to a binary PBM file."""
    Path(path).write_bytes(to_pbm(codes, width, height, quiet))


def _read_message(data: bytes) -> str:
    lines = data.decode("latin-1").split("\n")
    if lines[-1] == "":
        lines.pop()
    message = ""
    for line in lines:
        if message:
            message += "\n"
        message += line
    return message


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Read a message from a file and write its barcode as a PBM image."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("Code 128 Barcode Generator.\nUsage: barcode <inputFile> <outputFile>")
        return 0

    try:
        data = Path(args[0]).read_bytes()
    except OSError:
        print("Error: Invalid input file provided.", file=sys.stderr)
        return 1

    message = _read_message(data)
    if len(message) > 128:
        print("Error: Input message is too long.", file=sys.stderr)
        return 1

    try:
        codes = encode(message)
    except BarcodeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    write_pbm(codes, args[1])
    return 0