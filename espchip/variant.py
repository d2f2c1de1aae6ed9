# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Mapping, NamedTuple

from .loader import XTAL_WARN_THRESHOLD, Loader, StubImage, get_stub_json_path
from .mac import mac_from_two_words
from .util import FatalError, NotSupportedError, extract_field, format_mac, uint32


class EfuseField(NamedTuple):
    """Location of a bit field: word `word` of the block at `base`"""

    base: int
    word: int
    shift: int
    mask: int

    @property
    def addr(self) -> int:
        return self.base + (4 * self.word)


class ChipVariant(ABC):
    """Base class for ESP chip descriptors.

    A descriptor holds the fixed constants of one chip family and knows how to
    decode that family's identity efuses through a connected Loader. It keeps
    no state of its own, so any number of queries against unchanged hardware
    give the same results.

    Don't instantiate this base class, pick a class from targets.CHIP_DEFS.
    """

    CHIP_NAME = "Espressif device"
    IMAGE_CHIP_ID: int | None = None

    # Flash sector size, minimum unit of erase.
    FLASH_SECTOR_SIZE = 0x1000

    FLASH_WRITE_SIZE = 0x400

    # Bootloader flashing offset
    BOOTLOADER_FLASH_OFFSET = 0x0

    UART_DATE_REG_ADDR = 0x60000078

    UART_CLKDIV_REG: int
    UART_CLKDIV_MASK = 0xFFFFF
    # Bus clock = XTAL_CLK_DIVIDER * crystal frequency
    XTAL_CLK_DIVIDER = 1

    EFUSE_RD_REG_BASE: int
    MAC_EFUSE_REG: int

    SPI_REG_BASE: int
    SPI_USR_OFFS: int
    SPI_USR1_OFFS: int
    SPI_USR2_OFFS: int
    SPI_MOSI_DLEN_OFFS: int | None
    SPI_MISO_DLEN_OFFS: int | None
    SPI_W0_OFFS: int

    FLASH_SIZES: Mapping[str, int] = MappingProxyType(
        {
            "1MB": 0x00,
            "2MB": 0x10,
            "4MB": 0x20,
            "8MB": 0x30,
            "16MB": 0x40,
            "32MB": 0x50,
            "64MB": 0x60,
            "128MB": 0x70,
        }
    )

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.CHIP_NAME} chip descriptor is read-only")

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.CHIP_NAME}>"

    @classmethod
    def parse_flash_size_arg(cls, arg):
        try:
            return cls.FLASH_SIZES[arg]
        except KeyError:
            raise FatalError(
                "Flash size '%s' is not supported by this chip type. "
                "Supported sizes: %s" % (arg, ", ".join(cls.FLASH_SIZES.keys()))
            )

    @classmethod
    def load_stub(cls, stub_dir=None) -> StubImage:
        """
        Load this chip's flasher stub descriptor from stub_dir (or the
        configured `stub_dir`). The package ships no stub descriptors, they come
        from the stub build, so without one in place this raises FatalError.
        """
        return StubImage.from_json(get_stub_json_path(cls.CHIP_NAME, stub_dir))

    async def read_efuse(self, loader: Loader, n: int):
        """Read the nth word of the efuse read region."""
        return uint32(await loader.read_reg(self.EFUSE_RD_REG_BASE + (4 * n)))

    async def read_field(self, loader: Loader, field: EfuseField) -> int:
        word = uint32(await loader.read_reg(field.addr))
        value = extract_field(word, field.shift, field.mask)
        loader.debug(
            f"Efuse {field.addr:#010x} = {word.uint:#010x}, "
            f"bits [{field.shift}+{field.mask:#x}] = {value}"
        )
        return value

    async def get_pkg_version(self, loader: Loader) -> int:
        raise NotSupportedError(self, "Reading the package version")

    async def get_major_chip_version(self, loader: Loader) -> int:
        raise NotSupportedError(self, "Reading the chip revision")

    async def get_minor_chip_version(self, loader: Loader) -> int:
        raise NotSupportedError(self, "Reading the chip revision")

    async def get_chip_revision(self, loader: Loader) -> int:
        major_rev = await self.get_major_chip_version(loader)
        minor_rev = await self.get_minor_chip_version(loader)
        return major_rev * 100 + minor_rev

    @abstractmethod
    async def get_chip_description(self, loader: Loader) -> str:
        pass

    @abstractmethod
    async def get_chip_features(self, loader: Loader) -> list[str]:
        pass

    async def get_crystal_freq(self, loader: Loader) -> int:
        """
        Figure out the crystal frequency from the UART clock divider

        Returns a normalized value in integer MHz (only values 40 or 26 are supported)
        """
        # The logic here is:
        # - We know that our baud rate and the ESP UART baud rate are roughly the same,
        #   or we couldn't communicate
        # - We can read the UART clock divider register to know how the ESP derives this
        #   from the APB bus frequency
        # - Multiplying these two together gives us the bus frequency which is either
        #   the crystal frequency (ESP32) or double the crystal frequency (ESP8266).
        #   See the self.XTAL_CLK_DIVIDER parameter for this factor.
        uart_div = extract_field(
            await loader.read_reg(self.UART_CLKDIV_REG), 0, self.UART_CLKDIV_MASK
        )
        est_xtal = (loader.baudrate * uart_div) / 1e6 / self.XTAL_CLK_DIVIDER
        norm_xtal = 40 if est_xtal > 33 else 26
        if abs(norm_xtal - est_xtal) > XTAL_WARN_THRESHOLD:
            loader.warning(
                "Detected crystal freq %.2fMHz is quite different to "
                "normalized freq %dMHz. Unsupported crystal in use?"
                % (est_xtal, norm_xtal)
            )
        return norm_xtal

    async def read_mac(self, loader: Loader) -> str:
        """Read MAC from EFUSE region"""
        mac0 = await loader.read_reg(self.MAC_EFUSE_REG)
        mac1 = await loader.read_reg(self.MAC_EFUSE_REG + 4)
        return format_mac(mac_from_two_words(mac0, mac1))

    def get_erase_size(self, offset, size):
        return size

    async def post_connect(self, loader: Loader):
        """
        Additional initialization hook, may be overridden by the chip-specific class.
        Gets called once after connect, and after auto-detection.
        """
        pass
