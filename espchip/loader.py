# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

import base64
import binascii
import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .config import load_config_file
from .logger import log
from .util import FatalError, strip_chip_name

cfg, _ = load_config_file()
cfg = cfg["espchip"]

# Directory holding stub_flasher_<chip>.json descriptors
STUBS_DIR = cfg.get(
    "stub_dir", os.path.join(os.path.dirname(__file__), "targets", "stub_flasher")
)
# Crystal estimates further than this (in MHz) from 26/40 MHz get a warning
XTAL_WARN_THRESHOLD = cfg.getfloat("xtal_warn_threshold", 1)


def get_stub_json_path(chip_name, stub_dir=None):
    chip_name = strip_chip_name(chip_name)
    chip_name = chip_name.replace("esp", "")
    return os.path.join(stub_dir or STUBS_DIR, f"stub_flasher_{chip_name}.json")


@dataclass(frozen=True)
class StubImage:
    """Flasher stub payload and its load addresses, as consumed by the uploader"""

    text: bytes
    text_start: int
    entry: int
    data: bytes | None = None
    data_start: int | None = None
    bss_start: int | None = None

    @classmethod
    def from_json(cls, json_path):
        try:
            with open(json_path) as json_file:
                stub = json.load(json_file)
        except FileNotFoundError:
            raise FatalError(f"Flasher stub descriptor {json_path} not found")
        except json.JSONDecodeError as e:
            raise FatalError(f"Invalid flasher stub descriptor {json_path}: {e}")

        try:
            text = base64.b64decode(stub["text"], validate=True)
            text_start = stub["text_start"]
            entry = stub["entry"]
        except KeyError as e:
            raise FatalError(f"Flasher stub descriptor {json_path} is missing {e}")
        except binascii.Error as e:
            raise FatalError(f"Invalid stub text in {json_path}: {e}")

        try:
            data = base64.b64decode(stub["data"], validate=True)
            data_start = stub["data_start"]
        except KeyError:
            data = None
            data_start = None
        except binascii.Error as e:
            raise FatalError(f"Invalid stub data in {json_path}: {e}")

        return cls(
            text=text,
            text_start=text_start,
            entry=entry,
            data=data,
            data_start=data_start,
            bss_start=stub.get("bss_start"),
        )


class Loader(ABC):
    """Register access to a connected ESP ROM or stub bootloader.

    This is the only channel the chip descriptors talk to the device through.
    Implementations own the transport (framing, retries, timeouts); a failed
    read must raise, and the exception is propagated to the caller as-is.

    The channel is half-duplex: callers await every read_reg() before issuing
    the next one.
    """

    # Maximum block size for RAM writes, may be lowered by a chip's post_connect()
    ESP_RAM_BLOCK = 0x1800

    @property
    @abstractmethod
    def baudrate(self) -> int:
        """Baud rate of the active transport"""
        pass

    @abstractmethod
    async def read_reg(self, addr: int) -> int:
        """Read a 32-bit register or memory word at addr"""
        pass

    def debug(self, message: str):
        log.debug(message)

    def info(self, message: str):
        log.print(message)

    def warning(self, message: str):
        log.warning(message)

    def error(self, message: str):
        log.error(message)
