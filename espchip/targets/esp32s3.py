# SPDX-FileCopyrightText: 2014-2024 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from ..variant import ChipVariant, EfuseField


class ESP32S3(ChipVariant):
    """Chip descriptor for ESP32-S3"""

    CHIP_NAME = "ESP32-S3"
    IMAGE_CHIP_ID = 9

    UART_DATE_REG_ADDR = 0x60000080

    SPI_REG_BASE = 0x60002000
    SPI_USR_OFFS = 0x18
    SPI_USR1_OFFS = 0x1C
    SPI_USR2_OFFS = 0x20
    SPI_MOSI_DLEN_OFFS = 0x24
    SPI_MISO_DLEN_OFFS = 0x28
    SPI_W0_OFFS = 0x58

    BOOTLOADER_FLASH_OFFSET = 0x0

    EFUSE_BASE = 0x60007000
    EFUSE_BLOCK1_ADDR = EFUSE_BASE + 0x44
    EFUSE_BLOCK2_ADDR = EFUSE_BASE + 0x5C
    MAC_EFUSE_REG = EFUSE_BASE + 0x044

    EFUSE_RD_REG_BASE = EFUSE_BASE + 0x030  # BLOCK0 read base address

    UART_CLKDIV_REG = 0x60000014

    PKG_VERSION = EfuseField(EFUSE_BLOCK1_ADDR, 3, 21, 0x07)
    MINOR_VERSION_HI = EfuseField(EFUSE_BLOCK1_ADDR, 5, 23, 0x01)
    MINOR_VERSION_LO = EfuseField(EFUSE_BLOCK1_ADDR, 3, 18, 0x07)
    MAJOR_VERSION = EfuseField(EFUSE_BLOCK1_ADDR, 5, 24, 0x03)
    BLK_VERSION_MAJOR = EfuseField(EFUSE_BLOCK2_ADDR, 4, 0, 0x03)
    BLK_VERSION_MINOR = EfuseField(EFUSE_BLOCK1_ADDR, 3, 24, 0x07)
    FLASH_CAP = EfuseField(EFUSE_BLOCK1_ADDR, 3, 27, 0x07)
    FLASH_VENDOR = EfuseField(EFUSE_BLOCK1_ADDR, 4, 0, 0x07)
    PSRAM_CAP = EfuseField(EFUSE_BLOCK1_ADDR, 4, 3, 0x03)
    PSRAM_CAP_HI = EfuseField(EFUSE_BLOCK1_ADDR, 5, 19, 0x01)
    PSRAM_VENDOR = EfuseField(EFUSE_BLOCK1_ADDR, 4, 7, 0x03)

    async def get_pkg_version(self, loader):
        return await self.read_field(loader, self.PKG_VERSION)

    async def is_eco0(self, loader, minor_raw):
        # Workaround: The major version field was allocated to other purposes
        # when block version is v1.1.
        # Luckily only chip v0.0 have this kind of block version and efuse usage.
        return (
            (minor_raw & 0x7) == 0
            and await self.get_blk_version_major(loader) == 1
            and await self.get_blk_version_minor(loader) == 1
        )

    async def get_minor_chip_version(self, loader):
        minor_raw = await self.get_raw_minor_chip_version(loader)
        if await self.is_eco0(loader, minor_raw):
            return 0
        return minor_raw

    async def get_raw_minor_chip_version(self, loader):
        hi = await self.read_field(loader, self.MINOR_VERSION_HI)
        low = await self.read_field(loader, self.MINOR_VERSION_LO)
        return (hi << 3) + low

    async def get_blk_version_major(self, loader):
        return await self.read_field(loader, self.BLK_VERSION_MAJOR)

    async def get_blk_version_minor(self, loader):
        return await self.read_field(loader, self.BLK_VERSION_MINOR)

    async def get_major_chip_version(self, loader):
        minor_raw = await self.get_raw_minor_chip_version(loader)
        if await self.is_eco0(loader, minor_raw):
            return 0
        return await self.read_field(loader, self.MAJOR_VERSION)

    async def get_chip_description(self, loader):
        major_rev = await self.get_major_chip_version(loader)
        minor_rev = await self.get_minor_chip_version(loader)
        pkg_version = await self.get_pkg_version(loader)

        chip_name = {
            0: "ESP32-S3 (QFN56)",
            1: "ESP32-S3-PICO-1 (LGA56)",
        }.get(pkg_version, "unknown ESP32-S3")

        return f"{chip_name} (revision v{major_rev}.{minor_rev})"

    async def get_flash_cap(self, loader):
        return await self.read_field(loader, self.FLASH_CAP)

    async def get_flash_vendor(self, loader):
        vendor_id = await self.read_field(loader, self.FLASH_VENDOR)
        return {1: "XMC", 2: "GD", 3: "FM", 4: "TT", 5: "BY"}.get(vendor_id, "")

    async def get_psram_cap(self, loader):
        psram_cap = await self.read_field(loader, self.PSRAM_CAP)
        psram_cap_hi_bit = await self.read_field(loader, self.PSRAM_CAP_HI)
        return (psram_cap_hi_bit << 2) | psram_cap

    async def get_psram_vendor(self, loader):
        vendor_id = await self.read_field(loader, self.PSRAM_VENDOR)
        return {1: "AP_3v3", 2: "AP_1v8"}.get(vendor_id, "")

    async def get_chip_features(self, loader):
        features = ["Wi-Fi", "BLE"]

        flash = {
            0: None,
            1: "Embedded Flash 8MB",
            2: "Embedded Flash 4MB",
        }.get(await self.get_flash_cap(loader), "Unknown Embedded Flash")
        if flash is not None:
            features += [flash + f" ({await self.get_flash_vendor(loader)})"]

        psram = {
            0: None,
            1: "Embedded PSRAM 8MB",
            2: "Embedded PSRAM 2MB",
            3: "Embedded PSRAM 16MB",
            4: "Embedded PSRAM 4MB",
        }.get(await self.get_psram_cap(loader), "Unknown Embedded PSRAM")
        if psram is not None:
            features += [psram + f" ({await self.get_psram_vendor(loader)})"]

        return features

    async def get_crystal_freq(self, loader):
        # ESP32S3 XTAL is fixed to 40MHz
        return 40
