# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from ..variant import ChipVariant, EfuseField


class ESP32C3(ChipVariant):
    """Chip descriptor for ESP32-C3 and ESP8685/ESP8686"""

    CHIP_NAME = "ESP32-C3"
    IMAGE_CHIP_ID = 5

    SPI_REG_BASE = 0x60002000
    SPI_USR_OFFS = 0x18
    SPI_USR1_OFFS = 0x1C
    SPI_USR2_OFFS = 0x20
    SPI_MOSI_DLEN_OFFS = 0x24
    SPI_MISO_DLEN_OFFS = 0x28
    SPI_W0_OFFS = 0x58

    BOOTLOADER_FLASH_OFFSET = 0x0

    UART_DATE_REG_ADDR = 0x60000000 + 0x7C

    UART_CLKDIV_REG = 0x60000014

    EFUSE_BASE = 0x60008800
    EFUSE_BLOCK1_ADDR = EFUSE_BASE + 0x044
    MAC_EFUSE_REG = EFUSE_BASE + 0x044

    EFUSE_RD_REG_BASE = EFUSE_BASE + 0x030  # BLOCK0 read base address

    PKG_VERSION = EfuseField(EFUSE_BLOCK1_ADDR, 3, 21, 0x07)
    MINOR_VERSION_HI = EfuseField(EFUSE_BLOCK1_ADDR, 5, 23, 0x01)
    MINOR_VERSION_LO = EfuseField(EFUSE_BLOCK1_ADDR, 3, 18, 0x07)
    MAJOR_VERSION = EfuseField(EFUSE_BLOCK1_ADDR, 5, 24, 0x03)
    FLASH_CAP = EfuseField(EFUSE_BLOCK1_ADDR, 3, 27, 0x07)
    FLASH_VENDOR = EfuseField(EFUSE_BLOCK1_ADDR, 4, 0, 0x07)

    async def get_pkg_version(self, loader):
        return await self.read_field(loader, self.PKG_VERSION)

    async def get_minor_chip_version(self, loader):
        hi = await self.read_field(loader, self.MINOR_VERSION_HI)
        low = await self.read_field(loader, self.MINOR_VERSION_LO)
        return (hi << 3) + low

    async def get_major_chip_version(self, loader):
        return await self.read_field(loader, self.MAJOR_VERSION)

    async def get_flash_cap(self, loader):
        return await self.read_field(loader, self.FLASH_CAP)

    async def get_flash_vendor(self, loader):
        vendor_id = await self.read_field(loader, self.FLASH_VENDOR)
        return {1: "XMC", 2: "GD", 3: "FM", 4: "TT", 5: "ZBIT"}.get(vendor_id, "")

    async def get_chip_description(self, loader):
        chip_name = {
            0: "ESP32-C3 (QFN32)",
            1: "ESP8685 (QFN28)",
            2: "ESP32-C3 AZ (QFN32)",
            3: "ESP8686 (QFN24)",
        }.get(await self.get_pkg_version(loader), "unknown ESP32-C3")
        major_rev = await self.get_major_chip_version(loader)
        minor_rev = await self.get_minor_chip_version(loader)
        return f"{chip_name} (revision v{major_rev}.{minor_rev})"

    async def get_chip_features(self, loader):
        features = ["Wi-Fi", "BLE"]

        flash = {
            0: None,
            1: "Embedded Flash 4MB",
            2: "Embedded Flash 2MB",
            3: "Embedded Flash 1MB",
            4: "Embedded Flash 8MB",
        }.get(await self.get_flash_cap(loader), "Unknown Embedded Flash")
        if flash is not None:
            features += [flash + f" ({await self.get_flash_vendor(loader)})"]
        return features

    async def get_crystal_freq(self, loader):
        # ESP32C3 XTAL is fixed to 40MHz
        return 40
