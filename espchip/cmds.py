# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from dataclasses import dataclass

from .loader import Loader
from .logger import log
from .variant import ChipVariant


@dataclass(frozen=True)
class ChipInfo:
    chip_name: str
    description: str
    features: list[str]
    crystal_freq: int
    mac: str


async def read_chip_info(esp: ChipVariant, loader: Loader) -> ChipInfo:
    """
    Run the chip identification sequence on a freshly connected device.

    Calls the chip's post-connect hook first, then reads the description,
    features, crystal frequency and MAC, one after another.

    Args:
        esp: Descriptor of the chip family the device was detected as.
        loader: Register access to the connected device.

    Returns:
        The collected identity of the device.
    """
    await esp.post_connect(loader)
    description = await esp.get_chip_description(loader)
    features = await esp.get_chip_features(loader)
    crystal_freq = await esp.get_crystal_freq(loader)
    mac = await esp.read_mac(loader)
    return ChipInfo(
        chip_name=esp.CHIP_NAME,
        description=description,
        features=features,
        crystal_freq=crystal_freq,
        mac=mac,
    )


async def print_chip_info(esp: ChipVariant, loader: Loader) -> ChipInfo:
    """
    Read and display the identity of the connected device.

    Args:
        esp: Descriptor of the chip family the device was detected as.
        loader: Register access to the connected device.
    """
    info = await read_chip_info(esp, loader)

    def print_line(label, value):
        log.print(f"{label + ':':<20}{value}")

    print_line("Chip type", info.description)
    print_line("Features", ", ".join(info.features))
    print_line("Crystal frequency", f"{info.crystal_freq}MHz")
    print_line("MAC", info.mac)
    return info
