# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

__all__ = [
    "CHIP_DEFS",
    "CHIP_LIST",
    "ChipInfo",
    "ChipVariant",
    "EfuseField",
    "EmulatedLoader",
    "FatalError",
    "Loader",
    "NotSupportedError",
    "StubImage",
    "get_chip_variant",
    "log",
    "print_chip_info",
    "read_chip_info",
]

__version__ = "1.0.0"

from espchip.cmds import ChipInfo, print_chip_info, read_chip_info
from espchip.emulate import EmulatedLoader
from espchip.loader import Loader, StubImage
from espchip.logger import log
from espchip.targets import CHIP_DEFS, CHIP_LIST, get_chip_variant
from espchip.util import FatalError, NotSupportedError
from espchip.variant import ChipVariant, EfuseField
