# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from types import MappingProxyType

from ..mac import mac_from_otp
from ..util import extract_field, format_mac
from ..variant import ChipVariant


class ESP8266(ChipVariant):
    """Chip descriptor for ESP8266 and ESP8285"""

    CHIP_NAME = "ESP8266"

    # OTP ROM addresses
    EFUSE_RD_REG_BASE = 0x3FF00050
    ESP_OTP_MAC0 = 0x3FF00050
    ESP_OTP_MAC1 = 0x3FF00054
    ESP_OTP_MAC3 = 0x3FF0005C

    SPI_REG_BASE = 0x60000200
    SPI_USR_OFFS = 0x1C
    SPI_USR1_OFFS = 0x20
    SPI_USR2_OFFS = 0x24
    SPI_MOSI_DLEN_OFFS = None
    SPI_MISO_DLEN_OFFS = None
    SPI_W0_OFFS = 0x40

    UART_CLKDIV_REG = 0x60000014

    XTAL_CLK_DIVIDER = 2

    FLASH_SIZES = MappingProxyType(
        {
            "512KB": 0x00,
            "256KB": 0x10,
            "1MB": 0x20,
            "2MB": 0x30,
            "4MB": 0x40,
            "2MB-c1": 0x50,
            "4MB-c1": 0x60,
            "8MB": 0x80,
            "16MB": 0x90,
        }
    )

    BOOTLOADER_FLASH_OFFSET = 0

    async def _get_efuse_flags(self, loader):
        # rX_Y = EFUSE_DATA_OUTX[Y]
        word0 = await self.read_efuse(loader, 0)
        word2 = await self.read_efuse(loader, 2)
        word3 = await self.read_efuse(loader, 3)
        return {
            "r0_4": extract_field(word0, 4, 0x1),
            "r0_5": extract_field(word0, 5, 0x1),
            "r2_16": extract_field(word2, 16, 0x1),
            "r3_25": extract_field(word3, 25, 0x1),
            "r3_26": extract_field(word3, 26, 0x1),
            "r3_27": extract_field(word3, 27, 0x1),
        }

    @staticmethod
    def _get_flash_size(flags):
        r0_4, r3_25 = flags["r0_4"], flags["r3_25"]
        r3_26, r3_27 = flags["r3_26"], flags["r3_27"]

        if r0_4 and not r3_25:
            if not r3_27 and not r3_26:
                return 1
            elif not r3_27 and r3_26:
                return 2
        if not r0_4 and r3_25:
            if not r3_27 and not r3_26:
                return 2
            elif not r3_27 and r3_26:
                return 4
        return -1

    async def get_chip_description(self, loader):
        flags = await self._get_efuse_flags(loader)
        # One or the other efuse bit is set for ESP8285
        is_8285 = flags["r0_4"] or flags["r2_16"]
        if is_8285:
            flash_size = self._get_flash_size(flags)
            # This efuse bit identifies the max flash temperature
            max_temp = flags["r0_5"]
            return {
                1: "ESP8285H08" if max_temp else "ESP8285N08",
                2: "ESP8285H16" if max_temp else "ESP8285N16",
            }.get(flash_size, "ESP8285")
        return "ESP8266EX"

    async def get_chip_features(self, loader):
        features = ["Wi-Fi"]
        if "ESP8285" in await self.get_chip_description(loader):
            features += ["Embedded Flash"]
        return features

    async def chip_id(self, loader):
        """
        Read Chip ID from efuse - the equivalent of the SDK system_get_chip_id() func
        """
        id0 = await loader.read_reg(self.ESP_OTP_MAC0)
        id1 = await loader.read_reg(self.ESP_OTP_MAC1)
        return extract_field(id0, 24, 0xFF) | (extract_field(id1, 0, 0xFFFFFF) << 8)

    async def read_mac(self, loader):
        """Read MAC from OTP ROM"""
        mac0 = await loader.read_reg(self.ESP_OTP_MAC0)
        mac1 = await loader.read_reg(self.ESP_OTP_MAC1)
        mac3 = await loader.read_reg(self.ESP_OTP_MAC3)
        return format_mac(mac_from_otp(mac0, mac1, mac3, loader))
