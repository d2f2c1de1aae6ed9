# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later
from __future__ import annotations
import re

from bitstring import BitArray


def uint32(value: int | BitArray) -> BitArray:
    """Return a register value as an explicit unsigned 32-bit word.

    Values outside the 32-bit range (e.g. sign-extended negatives coming from
    a transport) are wrapped, never sign-extended.
    """
    if isinstance(value, BitArray):
        if len(value) != 32:
            raise ValueError(f"Expected a 32-bit word, got {len(value)} bits")
        return value
    return BitArray(uint=value & 0xFFFFFFFF, length=32)


def extract_field(word: int | BitArray, shift: int, mask: int) -> int:
    """Return (word >> shift) & mask, computed on the unsigned 32-bit word"""
    word = uint32(word)
    return ((word >> shift) & uint32(mask)).uint


def format_mac(mac):
    """Format a sequence of 6 byte values as aa:bb:cc:dd:ee:ff"""
    return ":".join("%02x" % (b & 0xFF) for b in mac)


def strip_chip_name(chip_name):
    """Strip chip name to normalized form, e.g. `ESP32-S3` -> `esp32s3`"""
    return re.sub(r"[-()]", "", chip_name.lower())


class FatalError(RuntimeError):
    """
    Wrapper class for runtime errors that aren't caused by internal bugs, but by
    ESP ROM responses or input content.
    """

    def __init__(self, message):
        RuntimeError.__init__(self, message)


class NotSupportedError(FatalError):
    def __init__(self, esp, function_name):
        FatalError.__init__(
            self,
            f"{function_name} is not supported by {esp.CHIP_NAME}.",
        )
