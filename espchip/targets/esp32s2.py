# SPDX-FileCopyrightText: 2014-2024 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from ..util import extract_field
from ..variant import ChipVariant, EfuseField


class ESP32S2(ChipVariant):
    """Chip descriptor for ESP32-S2"""

    CHIP_NAME = "ESP32-S2"
    IMAGE_CHIP_ID = 2

    SPI_REG_BASE = 0x3F402000
    SPI_USR_OFFS = 0x18
    SPI_USR1_OFFS = 0x1C
    SPI_USR2_OFFS = 0x20
    SPI_MOSI_DLEN_OFFS = 0x24
    SPI_MISO_DLEN_OFFS = 0x28
    SPI_W0_OFFS = 0x58

    MAC_EFUSE_REG = 0x3F41A044  # ESP32-S2 has special block for MAC efuses

    UART_CLKDIV_REG = 0x3F400014

    BOOTLOADER_FLASH_OFFSET = 0x1000

    EFUSE_BASE = 0x3F41A000
    EFUSE_RD_REG_BASE = EFUSE_BASE + 0x030  # BLOCK0 read base address
    EFUSE_BLOCK1_ADDR = EFUSE_BASE + 0x044
    EFUSE_BLOCK2_ADDR = EFUSE_BASE + 0x05C

    UARTDEV_BUF_NO = 0x3FFFFD14  # Variable in ROM .bss which indicates the port in use
    UARTDEV_BUF_NO_USB_OTG = 2  # Value of the above indicating that USB-OTG is in use

    USB_RAM_BLOCK = 0x800  # Max block size USB-OTG is used

    PKG_VERSION = EfuseField(EFUSE_BLOCK1_ADDR, 4, 0, 0x0F)
    MINOR_VERSION_HI = EfuseField(EFUSE_BLOCK1_ADDR, 3, 20, 0x01)
    MINOR_VERSION_LO = EfuseField(EFUSE_BLOCK1_ADDR, 4, 4, 0x07)
    MAJOR_VERSION = EfuseField(EFUSE_BLOCK1_ADDR, 3, 18, 0x03)
    FLASH_VERSION = EfuseField(EFUSE_BLOCK1_ADDR, 3, 21, 0x0F)
    PSRAM_VERSION = EfuseField(EFUSE_BLOCK1_ADDR, 3, 28, 0x0F)
    # BLK_VERSION_MINOR
    BLOCK2_VERSION = EfuseField(EFUSE_BLOCK2_ADDR, 4, 4, 0x07)

    async def get_pkg_version(self, loader):
        return await self.read_field(loader, self.PKG_VERSION)

    async def get_minor_chip_version(self, loader):
        hi = await self.read_field(loader, self.MINOR_VERSION_HI)
        low = await self.read_field(loader, self.MINOR_VERSION_LO)
        return (hi << 3) + low

    async def get_major_chip_version(self, loader):
        return await self.read_field(loader, self.MAJOR_VERSION)

    async def get_flash_cap(self, loader):
        return await self.read_field(loader, self.FLASH_VERSION)

    async def get_psram_cap(self, loader):
        return await self.read_field(loader, self.PSRAM_VERSION)

    async def get_block2_version(self, loader):
        return await self.read_field(loader, self.BLOCK2_VERSION)

    async def get_chip_description(self, loader):
        flash_cap = await self.get_flash_cap(loader)
        psram_cap = await self.get_psram_cap(loader)
        chip_name = {
            0: "ESP32-S2",
            1: "ESP32-S2FH2",
            2: "ESP32-S2FH4",
            102: "ESP32-S2FNR2",
            100: "ESP32-S2R2",
        }.get(flash_cap + psram_cap * 100, "unknown ESP32-S2")
        major_rev = await self.get_major_chip_version(loader)
        minor_rev = await self.get_minor_chip_version(loader)
        return f"{chip_name} (revision v{major_rev}.{minor_rev})"

    async def get_chip_features(self, loader):
        features = ["Wi-Fi"]

        flash_version = {
            0: "No Embedded Flash",
            1: "Embedded Flash 2MB",
            2: "Embedded Flash 4MB",
        }.get(await self.get_flash_cap(loader), "Unknown Embedded Flash")
        features += [flash_version]

        psram_version = {
            0: "No Embedded PSRAM",
            1: "Embedded PSRAM 2MB",
            2: "Embedded PSRAM 4MB",
        }.get(await self.get_psram_cap(loader), "Unknown Embedded PSRAM")
        features += [psram_version]

        block2_version = {
            0: "No calibration in BLK2 of efuse",
            1: "ADC and temperature sensor calibration in BLK2 of efuse V1",
            2: "ADC and temperature sensor calibration in BLK2 of efuse V2",
        }.get(await self.get_block2_version(loader), "Unknown Calibration in BLK2")
        features += [block2_version]

        return features

    async def get_crystal_freq(self, loader):
        # ESP32-S2 XTAL is fixed to 40MHz
        return 40

    async def get_uart_no(self, loader):
        """
        Read the UARTDEV_BUF_NO register to get the number of the currently used console
        """
        return extract_field(await loader.read_reg(self.UARTDEV_BUF_NO), 0, 0xFF)

    async def uses_usb_otg(self, loader):
        """
        Check the UARTDEV_BUF_NO register to see if USB-OTG console is being used
        """
        return await self.get_uart_no(loader) == self.UARTDEV_BUF_NO_USB_OTG

    async def post_connect(self, loader):
        if await self.uses_usb_otg(loader):
            loader.debug(f"USB-OTG in use, RAM block size set to {self.USB_RAM_BLOCK}")
            loader.ESP_RAM_BLOCK = self.USB_RAM_BLOCK
